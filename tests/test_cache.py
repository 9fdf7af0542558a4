"""
Unit tests for asset_locator.cache module.

Tests cover:
- record_files / record_dirs add only new ids
- has / has_dir lookups
- mark_checked / is_checked
- URL prefixes and bundle targets never coexist for a reference
- Known sets never shrink
- Thread safety with concurrent access
"""

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from asset_locator.cache import DirectoryCache


class TestRecordFiles:
    """Tests for DirectoryCache.record_files and has."""

    def test_has_returns_false_for_unknown(self):
        cache = DirectoryCache()
        assert cache.has("images/a.png") is False

    def test_record_files_then_has(self):
        cache = DirectoryCache()
        cache.record_files(["images/a.png", "images/b.png"])

        assert cache.has("images/a.png")
        assert cache.has("images/b.png")
        assert not cache.has("images/c.png")

    def test_record_files_returns_new_count(self):
        cache = DirectoryCache()
        assert cache.record_files(["a", "b"]) == 2
        assert cache.record_files(["b", "c"]) == 1
        assert cache.record_files(["a", "b", "c"]) == 0
        assert cache.known_files_count == 3

    def test_record_files_deduplicates_input(self):
        cache = DirectoryCache()
        assert cache.record_files(["a", "a", "a"]) == 1
        assert cache.known_files_count == 1

    def test_record_file_single(self):
        cache = DirectoryCache()
        assert cache.record_file("uploads/hero.png") is True
        assert cache.record_file("uploads/hero.png") is False
        assert cache.has("uploads/hero.png")

    def test_record_files_accepts_generator(self):
        cache = DirectoryCache()
        cache.record_files(f"f{i}" for i in range(3))
        assert cache.known_files_count == 3


class TestRecordDirs:
    """Tests for DirectoryCache.record_dirs."""

    def test_record_dirs_then_has_dir(self):
        cache = DirectoryCache()
        assert cache.record_dirs(["images/sub"]) == 1
        assert cache.has_dir("images/sub")
        assert not cache.has("images/sub")

    def test_record_dirs_idempotent(self):
        cache = DirectoryCache()
        cache.record_dirs(["x", "y"])
        cache.record_dirs(["x", "y"])
        assert cache.known_dirs_count == 2


class TestChecked:
    """Tests for mark_checked / is_checked."""

    def test_unchecked_by_default(self):
        cache = DirectoryCache()
        assert cache.is_checked("[data] images") is False

    def test_mark_checked_idempotent(self):
        cache = DirectoryCache()
        cache.mark_checked("[data] images")
        cache.mark_checked("[data] images")
        assert cache.is_checked("[data] images")

    def test_checked_is_per_reference(self):
        cache = DirectoryCache()
        cache.mark_checked("[data] images")
        assert not cache.is_checked("[data] images/sub")


class TestProxyTargets:
    """Tests for URL prefixes and bundle target maps."""

    def test_url_prefix_roundtrip(self):
        cache = DirectoryCache()
        assert cache.url_prefix("[forgevtt] maps") is None
        assert cache.set_url_prefix("[forgevtt] maps", "https://assets.example.com/u/maps")
        assert cache.url_prefix("[forgevtt] maps") == "https://assets.example.com/u/maps"

    def test_target_files_returns_copy(self):
        cache = DirectoryCache()
        cache.set_target_files("[forgevtt] packs", {"a.png": "https://cdn/a.png"})

        targets = cache.target_files("[forgevtt] packs")
        targets["b.png"] = "https://cdn/b.png"

        assert cache.target_files("[forgevtt] packs") == {"a.png": "https://cdn/a.png"}

    def test_prefix_refused_when_targets_present(self):
        cache = DirectoryCache()
        cache.set_target_files("[forgevtt] packs", {"a.png": "https://cdn/a.png"})

        assert cache.set_url_prefix("[forgevtt] packs", "https://x") is False
        assert cache.url_prefix("[forgevtt] packs") is None

    def test_targets_refused_when_prefix_present(self):
        cache = DirectoryCache()
        cache.set_url_prefix("[forgevtt] maps", "https://x")

        assert cache.set_target_files("[forgevtt] maps", {"a.png": "https://cdn/a.png"}) is False
        assert cache.target_files("[forgevtt] maps") is None

    def test_targets_replace_prefix_when_asked(self):
        cache = DirectoryCache()
        cache.set_url_prefix("[forgevtt] modules/x", "https://x")

        assert cache.set_target_files(
            "[forgevtt] modules/x", {"a.png": "https://cdn/a.png"}, replace_prefix=True
        )
        assert cache.url_prefix("[forgevtt] modules/x") is None
        assert cache.target_files("[forgevtt] modules/x") == {"a.png": "https://cdn/a.png"}


class TestMonotonicGrowth:
    def test_sizes_never_decrease(self):
        cache = DirectoryCache()
        batches = [["a", "b"], [], ["b"], ["c", "d", "a"], ["e"]]
        sizes = []
        for batch in batches:
            cache.record_files(batch)
            cache.record_dirs(batch)
            sizes.append((cache.known_files_count, cache.known_dirs_count))

        assert sizes == sorted(sizes)
        assert sizes[-1] == (5, 5)


class TestDirectoryCacheThreadSafety:
    """Tests for DirectoryCache thread safety."""

    def test_concurrent_record_and_has(self):
        cache = DirectoryCache()
        num_threads = 10
        num_operations = 100
        errors = []

        def worker(thread_id: int):
            try:
                for i in range(num_operations):
                    file_id = f"dir{thread_id}/file{i}"
                    cache.record_files([file_id, "shared"])
                    if not cache.has(file_id):
                        errors.append(f"missing {file_id}")
            except Exception as e:
                errors.append(e)

        with ThreadPoolExecutor(max_workers=num_threads) as executor:
            futures = [executor.submit(worker, i) for i in range(num_threads)]
            for future in as_completed(futures):
                future.result()

        assert len(errors) == 0, f"Thread errors: {errors}"
        assert cache.known_files_count == num_threads * num_operations + 1

    def test_concurrent_mark_checked(self):
        cache = DirectoryCache()

        def mark_worker():
            for i in range(100):
                cache.mark_checked(f"[data] dir{i}")

        threads = [threading.Thread(target=mark_worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for i in range(100):
            assert cache.is_checked(f"[data] dir{i}")
