from teamhub.core.enums import Role, TaskStatus
from teamhub.core.visibility import partition, resolve_assignees


def test_staff_sees_trial_staff_role_task_as_subordinate(make_user, make_task):
    staff = make_user("staff-1", Role.STAFF)
    task = make_task(assigned_role=Role.TRIAL_STAFF, assigned_by_role=Role.ADMIN)

    board = partition([task], staff, [staff])

    assert board.mine == []
    assert [t.id for t in board.subordinates] == [task.id]


def test_own_tasks_are_never_subordinate(make_user, make_task):
    admin = make_user("admin-1", Role.ADMIN)
    trial = make_user("trial-1", Role.TRIAL_STAFF)
    task = make_task(assigned_user_ids=["admin-1", "trial-1"])

    board = partition([task], admin, [admin, trial])

    assert [t.id for t in board.mine] == [task.id]
    assert board.subordinates == []


def test_groups_are_disjoint(make_user, make_task):
    developer = make_user("dev-1", Role.DEVELOPER)
    staff = make_user("staff-1", Role.STAFF)
    peer = make_user("dev-2", Role.DEVELOPER)
    users = [developer, staff, peer]
    tasks = [
        make_task(assigned_role=Role.DEVELOPER),
        make_task(assigned_role=Role.STAFF),
        make_task(assigned_user_ids=["staff-1"]),
        make_task(assigned_user_ids=["dev-2"]),
        make_task(assigned_role=Role.ADMIN),
        make_task(assigned_user_ids=["dev-1", "staff-1"]),
    ]

    board = partition(tasks, developer, users)
    mine = {t.id for t in board.mine}
    subordinates = {t.id for t in board.subordinates}

    assert mine.isdisjoint(subordinates)
    assert mine == {"task-1", "task-6"}
    assert subordinates == {"task-2", "task-3"}


def test_dated_tasks_first_and_done_last(make_user, make_task):
    staff = make_user("staff-1", Role.STAFF)
    undated = make_task(id="undated", assigned_role=Role.STAFF)
    late = make_task(id="late", assigned_role=Role.STAFF, due_at=2_000)
    early_done = make_task(id="early-done", assigned_role=Role.STAFF, due_at=500, status=TaskStatus.DONE)
    early = make_task(id="early", assigned_role=Role.STAFF, due_at=1_000)

    board = partition([undated, late, early_done, early], staff, [staff])

    assert [t.id for t in board.mine] == ["early", "late", "undated", "early-done"]


def test_subordinates_sorted_by_due_date(make_user, make_task):
    admin = make_user("admin-1", Role.ADMIN)
    tasks = [
        make_task(id="b", assigned_role=Role.STAFF),
        make_task(id="a", assigned_role=Role.STAFF, due_at=10),
    ]

    assert [t.id for t in partition(tasks, admin, [admin]).subordinates] == ["a", "b"]


def test_trial_staff_and_anonymous_have_no_subordinates(make_user, make_task):
    trial = make_user("trial-1", Role.TRIAL_STAFF)
    tasks = [make_task(assigned_role=Role.TRIAL_STAFF), make_task(assigned_role=Role.STAFF)]

    board = partition(tasks, trial, [trial])
    assert len(board.mine) == 1
    assert board.subordinates == []

    empty = partition(tasks, None, [trial])
    assert empty.mine == [] and empty.subordinates == []


def test_peer_assignee_is_not_subordinate(make_user, make_task):
    staff = make_user("staff-1", Role.STAFF)
    peer = make_user("staff-2", Role.STAFF)
    unknown = make_task(assigned_user_ids=["ghost"])
    peer_task = make_task(assigned_user_ids=["staff-2"])

    board = partition([unknown, peer_task], staff, [staff, peer])

    assert board.mine == [] and board.subordinates == []


def test_role_assignees_follow_current_roles(make_user, make_task):
    task = make_task(assigned_role=Role.STAFF)
    before = [make_user("u1", Role.STAFF), make_user("u2", Role.TRIAL_STAFF)]
    after = [make_user("u1", Role.DEVELOPER), make_user("u2", Role.STAFF)]

    assert [user.uid for user in resolve_assignees(task, before)] == ["u1"]
    assert [user.uid for user in resolve_assignees(task, after)] == ["u2"]


def test_user_assignees_resolve_by_uid(make_user, make_task):
    task = make_task(assigned_user_ids=["u2"])
    users = [make_user("u1", Role.STAFF), make_user("u2", Role.TRIAL_STAFF)]

    assert [user.uid for user in resolve_assignees(task, users)] == ["u2"]


def test_subordinate_check_uses_current_assignee_roles(make_user, make_task):
    developer = make_user("dev-1", Role.DEVELOPER)
    task = make_task(assigned_user_ids=["u1"])

    board = partition([task], developer, [developer, make_user("u1", Role.STAFF)])
    assert [t.id for t in board.subordinates] == [task.id]

    board = partition([task], developer, [developer, make_user("u1", Role.ADMIN)])
    assert board.subordinates == []
