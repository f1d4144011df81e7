import logging
import os

from release_scanner import ScanStats, iter_audio_files, scan_releases


def test_release_with_many_tracks_is_yielded_once(tmp_path, write_track, fake_reader):
    root = tmp_path / "lib"
    write_track(root / "Band-Album-GRP" / "01.mp3", "Band|Album|Rock|2020")
    write_track(root / "Band-Album-GRP" / "02.mp3", "Band|Album|Jazz|2021")
    write_track(root / "Band-Album-GRP" / "CD2" / "01.mp3", "Band|Album|Pop|2022")

    stats = ScanStats()
    releases = list(scan_releases([str(root)], ".mp3", 1, tag_reader=fake_reader, stats=stats))

    assert len(releases) == 1
    info = releases[0]
    assert info.release_dir == os.path.abspath(str(root / "Band-Album-GRP"))
    assert info.release_name == "Band-Album-GRP"
    # first track in sorted traversal order supplies the facets
    assert info.genre == "Rock"
    assert info.year == "2020"
    assert stats.files_seen == 3
    assert stats.releases_found == 1


def test_tags_read_once_per_release(tmp_path, write_track, fake_reader):
    root = tmp_path / "lib"
    for n in range(4):
        write_track(root / "Rel" / f"{n:02d}.mp3", "A|B|C|2000")
    calls = []

    def reader(path):
        calls.append(path)
        return fake_reader(path)

    list(scan_releases([str(root)], ".mp3", 1, tag_reader=reader))
    assert len(calls) == 1


def test_dated_layout_with_depth_two(tmp_path, write_track, fake_reader):
    root = tmp_path / "recent"
    write_track(root / "2023-01-01" / "ReleaseX" / "disc1" / "t1.mp3", "X|X|X|2023")
    write_track(root / "2023-01-01" / "ReleaseY" / "t1.mp3", "Y|Y|Y|2023")
    write_track(root / "2023-01-02" / "ReleaseX" / "t1.mp3", "X2|X2|X2|2023")

    names = sorted(
        os.path.relpath(info.release_dir, str(root))
        for info in scan_releases([str(root)], ".mp3", 2, tag_reader=fake_reader)
    )
    assert names == [
        os.path.join("2023-01-01", "ReleaseX"),
        os.path.join("2023-01-01", "ReleaseY"),
        os.path.join("2023-01-02", "ReleaseX"),
    ]


def test_untagged_file_counts_as_seen_and_later_file_supplies_tags(tmp_path, write_track, fake_reader):
    root = tmp_path / "lib"
    write_track(root / "Rel" / "01.mp3", "")
    write_track(root / "Rel" / "02.mp3", "Artist|Album|Genre|1999")
    write_track(root / "Broken" / "01.mp3", "")

    stats = ScanStats()
    releases = list(scan_releases([str(root)], ".mp3", 1, tag_reader=fake_reader, stats=stats))

    assert [r.release_name for r in releases] == ["Rel"]
    assert releases[0].artist == "Artist"
    assert stats.files_seen == 3
    assert stats.releases_found == 1


def test_missing_root_warns_and_continues(tmp_path, write_track, fake_reader, caplog):
    root = tmp_path / "lib"
    write_track(root / "Rel" / "01.mp3", "A|B|C|2000")
    missing = str(tmp_path / "nope")

    with caplog.at_level(logging.WARNING):
        releases = list(scan_releases([missing, str(root)], ".mp3", 1, tag_reader=fake_reader))

    assert [r.release_name for r in releases] == ["Rel"]
    assert any("does not exist" in r.message and missing in r.message for r in caplog.records)


def test_extension_match_is_case_insensitive(tmp_path, write_track):
    root = tmp_path / "lib"
    write_track(root / "Rel" / "01.MP3", "x")
    write_track(root / "Rel" / "02.mp3", "x")
    write_track(root / "Rel" / "03.flac", "x")
    write_track(root / "Rel" / "cover.jpg", "x")

    found = sorted(os.path.basename(p) for p in iter_audio_files(str(root), ".mp3"))
    assert found == ["01.MP3", "02.mp3"]


def test_same_release_across_roots_is_deduplicated(tmp_path, write_track, fake_reader):
    root = tmp_path / "lib"
    write_track(root / "Rel" / "01.mp3", "A|B|C|2000")

    releases = list(
        scan_releases([str(root), str(root)], ".mp3", 1, tag_reader=fake_reader)
    )
    assert len(releases) == 1


def test_scan_is_restartable(tmp_path, write_track, fake_reader):
    root = tmp_path / "lib"
    write_track(root / "One" / "01.mp3", "A|B|C|2000")
    write_track(root / "Two" / "01.mp3", "A|B|C|2000")

    first = [r.release_name for r in scan_releases([str(root)], ".mp3", 1, tag_reader=fake_reader)]
    second = [r.release_name for r in scan_releases([str(root)], ".mp3", 1, tag_reader=fake_reader)]
    assert first == second == ["One", "Two"]


def test_directory_symlinks_followed_only_when_enabled(tmp_path, write_track):
    root = tmp_path / "lib"
    outside = tmp_path / "elsewhere"
    write_track(outside / "Linked" / "01.mp3", "x")
    root.mkdir()
    os.symlink(str(outside / "Linked"), str(root / "Linked"))

    assert list(iter_audio_files(str(root), ".mp3", follow_symlinks=False)) == []
    followed = list(iter_audio_files(str(root), ".mp3", follow_symlinks=True))
    assert followed == [os.path.join(str(root), "Linked", "01.mp3")]


def test_symlink_cycle_terminates(tmp_path, write_track):
    root = tmp_path / "lib"
    write_track(root / "Rel" / "01.mp3", "x")
    os.symlink(str(root), str(root / "Rel" / "loop"))

    found = list(iter_audio_files(str(root), ".mp3", follow_symlinks=True))
    assert found == [os.path.join(str(root), "Rel", "01.mp3")]


def test_access_denied_entry_is_skipped(tmp_path, write_track, fake_reader, monkeypatch):
    import release_scanner

    root = tmp_path / "lib"
    write_track(root / "One" / "01.mp3", "A|B|C|2000")
    write_track(root / "Two" / "01.mp3", "A|B|C|2001")
    real_walk = os.walk

    def walk_with_denied_dir(top, onerror=None, followlinks=False):
        onerror(PermissionError(13, "Permission denied", os.path.join(str(top), "Locked")))
        yield from real_walk(top, onerror=onerror, followlinks=followlinks)

    monkeypatch.setattr(release_scanner.os, "walk", walk_with_denied_dir)
    stats = ScanStats()
    releases = list(scan_releases([str(root)], ".mp3", 1, tag_reader=fake_reader, stats=stats))

    assert [r.release_name for r in releases] == ["One", "Two"]
    assert stats.files_seen == 2
    assert stats.releases_found == 2
