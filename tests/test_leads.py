from decimal import Decimal
from urllib.parse import parse_qs, urlparse

import pytest

import leads


def _lead(**overrides) -> dict:
    item = {
        "id": "L1",
        "name": "Priya Raman",
        "email": "priya@example.com",
        "whatsapp": "+91 98400 00000",
        "language": "tamil",
        "amount": "₹25,000",
        "created_at": "2025-03-01T10:00:00Z",
        "voice_transcript": "User: My employer has not paid me for two months",
    }
    item.update(overrides)
    return leads.to_lead(item)


class TestToLead:
    def test_defaults_for_missing_fields(self):
        lead = leads.to_lead({"id": "abc"})
        assert lead["name"] == ""
        assert lead["email"] == ""
        assert lead["status"] == "New"
        assert lead["assignedTo"] is None
        assert lead["created_at"] == ""
        assert lead["tags"] == []

    def test_created_at_normalized_to_utc_iso(self):
        lead = _lead(created_at="2025-03-01T15:30:00+05:30")
        assert lead["created_at"] == "2025-03-01T10:00:00+00:00"

    def test_epoch_created_at(self):
        lead = _lead(created_at=Decimal("0"))
        assert lead["created_at"] == "1970-01-01T00:00:00+00:00"

    def test_millisecond_epoch_created_at(self):
        lead = _lead(created_at=1718000000000)
        assert lead["created_at"] == "2024-06-10T06:13:20+00:00"

    def test_out_of_range_epoch_is_blank(self):
        assert _lead(created_at=Decimal("1e30"))["created_at"] == ""

    def test_unparseable_created_at_is_blank(self):
        assert _lead(created_at="last tuesday")["created_at"] == ""

    def test_contactable(self):
        assert leads.is_contactable(_lead())
        assert leads.is_contactable(_lead(email=""))
        assert not leads.is_contactable(_lead(email="", whatsapp=""))


class TestLawyersAndMeetings:
    def test_lawyer_defaults(self):
        lawyer = leads.to_lawyer({"id": "W1", "name": "A. Kumar"})
        assert lawyer["specialty"] == "General Practice"
        assert lawyer["availability"] == {}

    def test_meeting_defaults(self):
        meeting = leads.to_meeting({"id": "M1"})
        assert meeting["userName"] == "N/A"
        assert meeting["voiceTranscript"] == "No transcript available."
        assert meeting["startTime"]
        assert meeting["endTime"]

    def test_meeting_fields(self):
        meeting = leads.to_meeting({
            "id": "M1",
            "name": "Priya",
            "email": "p@example.com",
            "whatsapp": "+1 555",
            "meeting_link": "https://meet.example/abc",
            "start_time": "2025-03-02T09:00:00Z",
            "end_time": "2025-03-02T09:30:00Z",
            "voice_transcript": "User: hello",
        })
        assert meeting["userContact"] == {"email": "p@example.com", "phone": "+1 555"}
        assert meeting["meetingLink"] == "https://meet.example/abc"
        assert meeting["startTime"] == "2025-03-02T09:00:00Z"

    def test_lawyer_name_lookup(self):
        lawyers_by_id = {"W1": {"id": "W1", "name": "A. Kumar"}}
        assert leads.lawyer_name("W1", lawyers_by_id) == "A. Kumar"
        assert leads.lawyer_name("W9", lawyers_by_id) == "Unknown"
        assert leads.lawyer_name(None, lawyers_by_id) is None


class TestFilterAndSort:
    def setup_method(self):
        self.rows = [
            _lead(id="1", name="Priya", language="tamil", amount="5,000", created_at="2025-01-01T00:00:00Z"),
            _lead(id="2", name="arjun", language="English", amount="12000", created_at="2025-03-01T00:00:00Z",
                  assignedTo="W1", voice_transcript="User: tenancy dispute"),
            _lead(id="3", name="Meena", language="tamil", amount="", created_at="2025-02-01T00:00:00Z",
                  email="meena@example.com"),
        ]

    def test_free_text_query(self):
        assert [l["id"] for l in leads.filter_leads(self.rows, query="TENANCY")] == ["2"]

    def test_language_filter_is_case_insensitive(self):
        assert [l["id"] for l in leads.filter_leads(self.rows, language="english")] == ["2"]

    def test_assigned_filter(self):
        assert [l["id"] for l in leads.filter_leads(self.rows, assigned="yes")] == ["2"]
        assert [l["id"] for l in leads.filter_leads(self.rows, assigned="no")] == ["1", "3"]

    def test_no_filters_returns_everything(self):
        assert leads.filter_leads(self.rows) == self.rows

    def test_default_sort_newest_first(self):
        assert [l["id"] for l in leads.sort_leads(self.rows)] == ["2", "3", "1"]

    def test_sort_by_name_ascending_ignores_case(self):
        result = leads.sort_leads(self.rows, key="name", descending=False)
        assert [l["name"] for l in result] == ["arjun", "Meena", "Priya"]

    def test_sort_by_amount_uses_numbers(self):
        result = leads.sort_leads(self.rows, key="amount", descending=True)
        assert [l["id"] for l in result] == ["2", "1", "3"]

    def test_unknown_sort_key(self):
        with pytest.raises(ValueError):
            leads.sort_leads(self.rows, key="voice_transcript")


class TestCsvExport:
    def test_header_and_rows(self):
        rows = [_lead(assignedTo="W1"), _lead(id="L2", name='Smith, "Jr"')]
        text = leads.leads_to_csv(rows, {"W1": {"id": "W1", "name": "A. Kumar"}})
        lines = text.splitlines()
        assert lines[0] == "id,name,email,whatsapp,language,amount,created_at,assigned_to,status"
        assert lines[1].startswith("L1,Priya Raman,priya@example.com,")
        assert lines[1].endswith(",A. Kumar,New")
        assert '"Smith, ""Jr"""' in lines[2]

    def test_empty_table_is_just_a_header(self):
        assert leads.leads_to_csv([]) == "id,name,email,whatsapp,language,amount,created_at,assigned_to,status\n"


class TestRoundRobin:
    def test_cycles_through_lawyers_in_id_order(self):
        rows = [_lead(id=f"L{i}") for i in range(5)]
        lawyers = [{"id": "W2"}, {"id": "W1"}]
        assert leads.round_robin(rows, lawyers) == [
            ("L0", "W1"), ("L1", "W2"), ("L2", "W1"), ("L3", "W2"), ("L4", "W1"),
        ]

    def test_skips_already_assigned(self):
        rows = [_lead(id="L0", assignedTo="W9"), _lead(id="L1")]
        assert leads.round_robin(rows, [{"id": "W1"}]) == [("L1", "W1")]

    def test_requires_lawyers(self):
        with pytest.raises(ValueError):
            leads.round_robin([_lead()], [])


def test_calendar_link():
    url = leads.calendar_link(_lead())
    parsed = urlparse(url)
    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://calendar.google.com/calendar/render"
    query = parse_qs(parsed.query)
    assert query["action"] == ["TEMPLATE"]
    assert query["text"] == ["Meeting with Priya Raman"]
    assert query["details"] == ["Scheduled meeting to discuss: User: My employer has not paid me for two months"]
    assert query["add"] == ["priya@example.com"]
