from capacity_planner.models.entities import WorkItemStatus
from capacity_planner.services.dependencies import (
    can_start_in_sprint,
    dependencies_satisfied,
    dependency_chain,
    get_blocked_work_items,
    partition_blocked,
    unmet_dependencies,
)


def test_dependencies_satisfied_when_all_completed(make_item):
    """Testa um item cujas dependências estão concluídas"""
    dep = make_item("d1", status=WorkItemStatus.COMPLETED)
    item = make_item("w1", dependencies=["d1"])

    assert dependencies_satisfied(item, [dep, item])


def test_dependencies_not_satisfied_when_in_progress(make_item):
    """Testa um item com dependência em andamento"""
    dep = make_item("d1", status=WorkItemStatus.IN_PROGRESS)
    item = make_item("w1", dependencies=["d1"])

    assert not dependencies_satisfied(item, [dep, item])


def test_missing_dependency_is_satisfied(make_item):
    """Testa que referências inexistentes não bloqueiam o item"""
    item = make_item("w1", dependencies=["nao-existe"])
    assert dependencies_satisfied(item, [item])


def test_unmet_dependencies_by_sprint_order(make_item, sprints):
    """Testa que a dependência precisa terminar antes do início da sprint"""
    dep = make_item("d1", assigned_sprints=["s1"])
    item = make_item("w1", dependencies=["d1"])
    items = [dep, item]

    assert unmet_dependencies(item, sprints[0], items, sprints) == [dep]
    assert unmet_dependencies(item, sprints[1], items, sprints) == []
    assert can_start_in_sprint(item, sprints[2], items, sprints)


def test_unmet_dependencies_uses_latest_sprint(make_item, sprints):
    """Testa que dependências em várias sprints consideram a última"""
    dep = make_item("d1", assigned_sprints=["s1", "s2"])
    item = make_item("w1", dependencies=["d1"])

    assert not can_start_in_sprint(item, sprints[1], [dep, item], sprints)
    assert can_start_in_sprint(item, sprints[2], [dep, item], sprints)


def test_unassigned_dependency_is_unmet(make_item, sprints):
    """Testa que uma dependência sem sprint bloqueia o item"""
    dep = make_item("d1")
    item = make_item("w1", dependencies=["d1"])

    assert unmet_dependencies(item, sprints[2], [dep, item], sprints) == [dep]


def test_completed_dependency_never_blocks(make_item, sprints):
    """Testa que dependências concluídas são sempre aceitas"""
    dep = make_item("d1", status=WorkItemStatus.COMPLETED, assigned_sprints=["s3"])
    item = make_item("w1", dependencies=["d1"])

    assert can_start_in_sprint(item, sprints[0], [dep, item], sprints)


def test_partition_blocked(make_item):
    """Testa a separação entre itens bloqueados e prontos"""
    open_dep = make_item("d1")
    done_dep = make_item("d2", status=WorkItemStatus.COMPLETED)
    blocked = make_item("w1", dependencies=["d1"])
    ready = make_item("w2", dependencies=["d2"])
    items = [open_dep, done_dep, blocked, ready]

    blocked_items, ready_items = partition_blocked([blocked, ready, open_dep], items)

    assert [w.id for w in blocked_items] == ["w1"]
    assert [w.id for w in ready_items] == ["w2", "d1"]
    assert get_blocked_work_items(items, items) == [blocked]


def test_completed_item_is_never_blocked(make_item):
    """Testa que um item concluído não aparece como bloqueado"""
    dep = make_item("d1")
    item = make_item("w1", dependencies=["d1"], status=WorkItemStatus.COMPLETED)

    assert get_blocked_work_items([item], [dep, item]) == []


def test_dependency_chain_deepest_first(make_item):
    """Testa a cadeia transitiva A -> B -> C"""
    c = make_item("c")
    b = make_item("b", dependencies=["c"])
    a = make_item("a", dependencies=["b"])

    assert [w.id for w in dependency_chain(a, [a, b, c])] == ["c", "b"]


def test_dependency_chain_tolerates_cycles(make_item):
    """Testa que ciclos não causam laço infinito"""
    a = make_item("a", dependencies=["b"])
    b = make_item("b", dependencies=["c"])
    c = make_item("c", dependencies=["a"])

    assert [w.id for w in dependency_chain(a, [a, b, c])] == ["c", "b"]


def test_dependency_chain_shared_dependency(make_item):
    """Testa que dependências compartilhadas aparecem uma única vez"""
    d = make_item("d")
    b = make_item("b", dependencies=["d"])
    c = make_item("c", dependencies=["d"])
    a = make_item("a", dependencies=["b", "c"])

    assert [w.id for w in dependency_chain(a, [a, b, c, d])] == ["d", "b", "c"]
