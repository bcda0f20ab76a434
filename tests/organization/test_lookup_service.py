from src.attendance_audit.attendance_audit.organization.service import OrganizationLookupService
from src.attendance_audit.attendance_audit.punches.model import Section, SubSection


class FakeHierarchyRepo:
    def __init__(self):
        self.last_args = {}

    def list_divisions(self):
        return []

    def list_sections(self, *, division_id=None):
        self.last_args["division_id"] = division_id
        return [Section("S1", "Warehouse", "D1")]

    def list_subsections(self, *, section_id=None):
        self.last_args["section_id"] = section_id
        return [SubSection("SS1", "Inbound", "S1")]


def test_lookups_without_cache_hit_the_repository():
    repo = FakeHierarchyRepo()
    svc = OrganizationLookupService(repo)

    assert svc.list_divisions() == []
    assert svc.list_sections("all") == [{"section_id": "S1", "section_name": "Warehouse", "division_id": "D1"}]
    assert repo.last_args["division_id"] is None
    assert svc.list_subsections(" S1 ")[0]["sub_section_id"] == "SS1"
    assert repo.last_args["section_id"] == "S1"
    assert svc.invalidate() == 0
