from __future__ import annotations

import logging

from sqlite3po.orm.identity_map import IdentityMap


class _Thing:
    pass


def test_set_then_get_returns_same_instance():
    cache: IdentityMap[_Thing] = IdentityMap(name="Thing")
    thing = _Thing()

    assert cache.set(1, thing) is thing
    assert cache.get(1) is thing
    assert 1 in cache
    assert len(cache) == 1


def test_set_none_evicts_entry():
    cache: IdentityMap[_Thing] = IdentityMap(name="Thing")
    cache.set(1, _Thing())

    assert cache.set(1, None) is None
    assert cache.get(1) is None
    assert len(cache) == 0
    # Evicting an id that is not cached is harmless.
    assert cache.set(2, None) is None


def test_none_id_is_never_cached():
    cache: IdentityMap[_Thing] = IdentityMap(name="Thing")
    thing = _Thing()

    assert cache.set(None, thing) is thing
    assert cache.get(None) is None
    assert len(cache) == 0


def test_replacement_is_logged(caplog):
    cache: IdentityMap[_Thing] = IdentityMap(name="Thing")
    cache.set(7, _Thing())

    with caplog.at_level(logging.DEBUG, logger="sqlite3po.orm.identity_map"):
        cache.set(7, _Thing())

    assert "Replacing cached Thing object with rowid 7" in caplog.text
    assert caplog.records[-1].row_id == 7


def test_clear_drops_everything_and_reports_count():
    cache: IdentityMap[_Thing] = IdentityMap(name="Thing")
    for row_id in (1, 2, 3):
        cache.set(row_id, _Thing())

    assert cache.clear() == 3
    assert len(cache) == 0
    assert list(cache) == []
