"""Property-based tests for the user store using Hypothesis.

Minimum 100 iterations per property (configured via settings).
"""

import sys
import os

from hypothesis import given, settings, HealthCheck
from hypothesis import strategies as st

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from src.core.user_record_store import UserRecordStore
from src.storage.key_value_storage import MemoryStorage


# ── Shared helpers ────────────────────────────────────────────────────

# Alphabet cannot spell 'admin' or 'system'
usernames = st.text(alphabet='abcdefgh', min_size=1, max_size=6)
passwords = st.text(min_size=1, max_size=12)


def _fresh_store(storage=None) -> UserRecordStore:
    store = UserRecordStore(storage if storage is not None else MemoryStorage())
    store.initialize()
    return store


# ======================================================================
# Usernames stay unique
# Any sequence of creations keeps one record per name, holding the
# password of the first successful creation.
# ======================================================================

@settings(max_examples=100, deadline=None,
          suppress_health_check=[HealthCheck.too_slow])
@given(ops=st.lists(st.tuples(usernames, passwords), max_size=15))
def test_usernames_unique(ops):
    store = _fresh_store()
    first_password = {}
    for name, pw in ops:
        created = store.create_user(name, pw)
        assert created == (name not in first_password)
        first_password.setdefault(name, pw)

    listed = store.list_users()
    assert [u.username for u in listed] == list(first_password.keys())
    for user in listed:
        assert user.password == first_password[user.username]


# ======================================================================
# Admin is protected
# Whatever users exist, deleting 'admin' fails and the admin survives.
# ======================================================================

@settings(max_examples=100, deadline=None,
          suppress_health_check=[HealthCheck.too_slow])
@given(names=st.lists(usernames, max_size=10))
def test_admin_never_deleted(names):
    store = _fresh_store()
    for name in names:
        store.create_user(name, 'pw')
    assert store.delete_user('admin') is False
    assert store.validate_credentials('admin', 'admin123') is not None
    assert all(u.username != 'admin' for u in store.list_users())


# ======================================================================
# Blank usernames are rejected
# ======================================================================

@settings(max_examples=100, deadline=None)
@given(name=st.text(alphabet=' \t\n', max_size=5), pw=passwords)
def test_blank_username_rejected(name, pw):
    store = _fresh_store()
    assert store.create_user(name, pw) is False
    assert store.list_users() == []


# ======================================================================
# Cascading delete
# Deleting a user removes every one of their activity entries and leaves
# a system notice naming them.
# ======================================================================

@settings(max_examples=100, deadline=None,
          suppress_health_check=[HealthCheck.too_slow])
@given(name=usernames, descriptions=st.lists(st.text(max_size=20), max_size=8))
def test_delete_cascades(name, descriptions):
    store = _fresh_store()
    store.create_user(name, 'pw')
    for d in descriptions:
        store.record_activity(name, d)
    assert store.delete_user(name)
    assert store.get_activities_for(name) == []
    notices = [a.description for a in store.get_activities_for('system')]
    assert f'User {name} deleted and all data cleared' in notices


# ======================================================================
# Persistence round trip
# A store reloaded from the same storage sees the same users and the
# same activity logs, in the same order.
# ======================================================================

@settings(max_examples=100, deadline=None,
          suppress_health_check=[HealthCheck.too_slow])
@given(
    users=st.lists(st.tuples(usernames, passwords), max_size=8),
    activities=st.lists(st.tuples(usernames, st.text(max_size=20)), max_size=12),
)
def test_reload_round_trip(users, activities):
    storage = MemoryStorage()
    store = _fresh_store(storage)
    for name, pw in users:
        store.create_user(name, pw)
    for name, desc in activities:
        store.record_activity(name, desc)

    reloaded = _fresh_store(storage)
    assert [u.to_dict() for u in reloaded.list_users()] == \
        [u.to_dict() for u in store.list_users()]
    for name in {n for n, _ in users} | {n for n, _ in activities} | {'system'}:
        assert reloaded.get_activities_for(name) == store.get_activities_for(name)


# ======================================================================
# Storage usage accounting
# total_bytes is the sum of the stored collections' UTF-8 lengths.
# ======================================================================

@settings(max_examples=100, deadline=None)
@given(names=st.lists(usernames, max_size=6), note=st.text(max_size=30))
def test_storage_usage_total(names, note):
    storage = MemoryStorage()
    store = _fresh_store(storage)
    for name in names:
        store.create_user(name, 'pw')
    store.record_activity('system', note)

    expected = sum(
        len((storage.get_item(k) or '').encode('utf-8'))
        for k in ('users', 'userActivities')
    )
    usage = store.storage_usage()
    assert usage.total_bytes == expected
    assert usage.user_count == len(set(names)) + 1
