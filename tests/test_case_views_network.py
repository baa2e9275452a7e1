import pandas as pd

from vetting_dashboard.data.case_views import case_details, case_dossier, case_timeline, entity_details
from vetting_dashboard.risk.network import NetworkNode, RelationshipGraph, build_relationship_graph, force_layout
from vetting_dashboard.risk.profiles import directors_frame, suppliers_frame

AS_OF = pd.Timestamp("2025-06-02 09:00", tz="UTC")


def _case_with_completed_checks(bundle):
    done = bundle.case_checks[bundle.case_checks["status"] == "Complete"]
    return done["case_id"].iloc[0]


def test_case_details(bundle):
    case_id = _case_with_completed_checks(bundle)
    details = case_details(bundle, case_id)
    case = bundle.cases.set_index("case_id").loc[case_id]
    assert details["case_number"] == case["case_number"]
    assert details["notes"][1] == f"Assigned to {case['assigned_officer']}"
    assert 0 <= details["risk_score"] <= 100
    assert case_details(bundle, "case_missing") is None


def test_case_timeline_is_chronological(bundle):
    case_id = _case_with_completed_checks(bundle)
    timeline = case_timeline(bundle, case_id)
    assert [e["type"] for e in timeline[:2]] == ["created", "assigned"]
    assert any(e["type"] == "check_completed" for e in timeline)
    stamps = [e["timestamp"] for e in timeline]
    assert stamps == sorted(stamps)
    assert case_timeline(bundle, "case_missing") == []


def test_entity_details_by_identifier(bundle):
    case = bundle.cases.iloc[0]
    entity = entity_details(bundle, case["entity_identifier"])
    assert entity["id"] == case["case_id"]
    assert set(entity["risk_profile"]) == {"overall", "financial", "compliance", "reputation"}
    assert entity["relationship_history"][0]["case_number"] == case["case_number"]
    assert entity_details(bundle, "nobody") is None


def test_case_dossier(bundle):
    case_id = bundle.cases["case_id"].iloc[0]
    dossier = case_dossier(bundle, case_id, as_of=AS_OF)
    case = bundle.cases.iloc[0]
    assert dossier["report_generated"] == AS_OF
    assert dossier["days_active"] == case["days_since_initiated"]
    assert len(dossier["check_results"]) == case["total_checks"]
    assert dossier["overdue_status"] in ("Yes", "No")
    assert dossier["documents"][1]["name"] == "Signed Consent Form"
    assert case_dossier(bundle, "case_missing", as_of=AS_OF) is None


def test_dossier_uses_linked_consents(bundle):
    pending = bundle.cases[bundle.cases["status"] == "Consent Pending"]
    if pending.empty:
        return
    dossier = case_dossier(bundle, pending["case_id"].iloc[0], as_of=AS_OF)
    assert all(record["obtained_date"] is None for record in dossier["consent_records"])
    assert dossier["consent_records"][0]["method"] in ("SMS Link", "Email Link")


def test_relationship_graph():
    graph = build_relationship_graph(suppliers_frame(), directors_frame())
    kinds = {node.kind for node in graph.nodes}
    assert kinds == {"supplier", "director"}
    assert len([n for n in graph.nodes if n.kind == "supplier"]) == 13
    assert graph.degree()["DIR_04"] == 4


def test_force_layout_edge_cases():
    assert force_layout(RelationshipGraph([], [])) == {}
    single = RelationshipGraph([NetworkNode("A", "A", "supplier", 10)], [])
    assert force_layout(single) == {"A": (0.5, 0.5)}


def test_force_layout_is_normalised_and_deterministic():
    graph = build_relationship_graph(suppliers_frame(), directors_frame())
    first = force_layout(graph, iterations=40)
    second = force_layout(graph, iterations=40)
    assert first == second
    assert set(first) == {node.node_id for node in graph.nodes}
    for x, y in first.values():
        assert 0.0 <= x <= 1.0 and 0.0 <= y <= 1.0
