import pytest

from navigator.personalization import Checklist
from navigator.procedures import (
    available_procedures,
    document_checklist,
    flowchart_connections,
    flowchart_nodes,
    load_procedure,
    seed_checklist,
    split_branches,
    timeline_range,
)


def test_catalog():
    assert available_procedures() == ["family-court", "small-claims"]
    with pytest.raises(KeyError):
        load_procedure("traffic-court")


def test_nodes_without_current_step():
    nodes = flowchart_nodes(load_procedure("small-claims"))
    assert nodes[0].status == "optional"
    assert {n.status for n in nodes[1:]} == {"pending"}
    assert nodes[0].type == "start"
    assert nodes[-1].type == "end"


def test_status_projection_around_current():
    proc = load_procedure("small-claims")
    nodes = flowchart_nodes(proc, "small-claims-4")
    assert [n.status for n in nodes[:3]] == ["completed"] * 3
    assert nodes[3].status == "current"
    assert {n.status for n in nodes[4:]} == {"pending"}


def test_node_types_follow_documents():
    nodes = flowchart_nodes(load_procedure("small-claims"))
    assert nodes[1].type == "document"
    assert nodes[3].type == "process"


def test_connections_chain_nodes():
    nodes = flowchart_nodes(load_procedure("family-court"))
    conns = flowchart_connections(nodes)
    assert len(conns) == len(nodes) - 1
    assert conns[0].from_id == nodes[0].id and conns[0].to_id == nodes[1].id


def test_split_branches_rounds_up():
    nodes = flowchart_nodes(load_procedure("small-claims"))
    left, right = split_branches(nodes)
    assert (len(left), len(right)) == (4, 3)
    assert split_branches([]) == ([], [])


def test_timeline_range():
    assert timeline_range(load_procedure("small-claims")) == (60, 274)


def test_document_checklist_dedupes():
    docs = document_checklist(load_procedure("family-court"))
    names = [d.name for d in docs]
    assert names.count("Financial Statement") == 1


def test_seed_checklist_is_idempotent():
    proc = load_procedure("small-claims")
    checklist = Checklist()
    added = seed_checklist(proc, checklist)
    assert added == len(checklist) > 0
    assert all(i.category == "documents" for i in checklist)
    assert seed_checklist(proc, checklist) == 0
