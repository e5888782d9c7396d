import json
from datetime import timedelta
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import Client, TestCase
from django.utils import timezone
from rest_framework.authtoken.models import Token

from core.models import Destination, RailAgent, ShippingLine, TruckAgent
from quotes.models import CalculationHistory

from ..models import BorderDestinationFreight, CombinedFreight, FreightAuditLog, PortBorderFreight, SeaFreight
from ..services.policy import PolicyConfigurationError, clear_calculation_policy_cache


class FreightApiTestCase(TestCase):
    @classmethod
    def setUpTestData(cls):
        U = get_user_model()
        cls.admin = U.objects.create_user(username="ops-admin", password="x", role="admin")
        cls.user = U.objects.create_user(username="sales", password="x", role="user")
        cls.admin_token, _ = Token.objects.get_or_create(user=cls.admin)
        cls.user_token, _ = Token.objects.get_or_create(user=cls.user)

        today = timezone.localdate()
        cls.window = {"valid_from": today - timedelta(days=10), "valid_to": today + timedelta(days=30)}
        cls.destination = Destination.objects.create(code="OSH", name="Osh")
        RailAgent.objects.create(name="Asia Rail", code="AR")
        TruckAgent.objects.create(name="Asia Rail", code="AR")
        ShippingLine.objects.create(name="Harbor Marine", code="HM")

        SeaFreight.objects.create(pol="ICN", pod="QIN", carrier="Harbor Marine", rate=500, local_charge=20,
                                  created_by=cls.admin, **cls.window)
        PortBorderFreight.objects.create(agent="Asia Rail", pol="ICN", pod="QIN", rate=100, **cls.window)
        BorderDestinationFreight.objects.create(agent="Asia Rail", destination=cls.destination, rate=200, **cls.window)
        CombinedFreight.objects.create(agent="Asia Rail", pol="ICN", pod="QIN", destination=cls.destination,
                                       rate=250, **cls.window)

    def setUp(self):
        clear_calculation_policy_cache()
        self.c = Client()

    def auth(self, token):
        return {"HTTP_AUTHORIZATION": f"Token {token.key}"}

    def post(self, url, body, token, **extra):
        return self.c.post(url, data=json.dumps(body), content_type="application/json", **self.auth(token), **extra)


class CalculateEndpointTests(FreightApiTestCase):
    def body(self, **overrides):
        body = {"pol": "ICN", "pod": "QIN", "destination_id": str(self.destination.pk), "weight": "1000"}
        body.update(overrides)
        return body

    def test_requires_authentication(self):
        r = self.c.post("/api/pricing/calculate", data=json.dumps(self.body()), content_type="application/json")
        assert r.status_code == 401, r.status_code

    def test_calculate_returns_rows_and_records_history(self):
        r = self.post("/api/pricing/calculate", self.body(), self.user_token)
        assert r.status_code == 200, r.content
        data = r.json()

        assert data["lowest_cost"] == "770.00"
        assert data["lowest_cost_agent"] == "Asia Rail"
        assert sorted(row["total"] for row in data["breakdown"]) == ["770.00", "820.00"]
        assert data["missing_freights"] == []

        adjusted = data["adjusted"]
        assert [row["code"] for row in adjusted["rows"]] == ["HM-ARAR-C001"]
        assert adjusted["lowest_cost"] == "770.00"

        history = CalculationHistory.objects.get(pk=data["history_id"])
        assert history.created_by == self.user
        assert history.result["lowest_cost"] == "770.00"

    def test_exclusions_change_adjusted_total_only(self):
        r = self.post("/api/pricing/calculate", self.body(exclusions={"global": ["sea_freight"]}), self.user_token)
        assert r.status_code == 200, r.content
        data = r.json()
        assert data["lowest_cost"] == "770.00"
        assert data["adjusted"]["lowest_cost"] == "270.00"

    def test_unknown_exclusion_is_rejected(self):
        r = self.post("/api/pricing/calculate", self.body(exclusions={"global": ["llocal"]}), self.user_token)
        assert r.status_code == 400, r.content
        assert "exclusions" in r.json()

    def test_malformed_exclusions_are_rejected(self):
        for exclusions in ({"global": [5]}, {"rows": ["dthc"]}, {"rows": {"0": "dthc"}}):
            r = self.post("/api/pricing/calculate", self.body(exclusions=exclusions), self.user_token)
            assert r.status_code == 400, (exclusions, r.content)
            assert "exclusions" in r.json()

    def test_dp_without_general_sea_reports_missing(self):
        r = self.post("/api/pricing/calculate", self.body(pol="PUS", include_dp=True), self.user_token)
        assert r.status_code == 200, r.content
        data = r.json()
        assert data["breakdown"] == []
        assert [m["type"] for m in data["missing_freights"]] == ["seaFreight"]

    def test_policy_error_is_server_error(self):
        with patch("pricing.views.get_calculation_policy", side_effect=PolicyConfigurationError("missing")):
            r = self.post("/api/pricing/calculate", self.body(), self.user_token)
        assert r.status_code == 500
        assert r.json()["detail"] == "Calculation policy is misconfigured."


class RateTableEndpointTests(FreightApiTestCase):
    url = "/api/pricing/port-border-freights/"

    def rate_body(self, **overrides):
        body = {
            "agent": "Steppe",
            "pol": "ICN",
            "pod": "QIN",
            "rate": "120.00",
            "valid_from": self.window["valid_from"].isoformat(),
            "valid_to": self.window["valid_to"].isoformat(),
        }
        body.update(overrides)
        return body

    def test_users_can_read_but_not_write(self):
        r = self.c.get(self.url, **self.auth(self.user_token))
        assert r.status_code == 200
        assert r.json()[0]["validity_status"]["status"] in ("active", "expiring")

        r = self.post(self.url, self.rate_body(), self.user_token)
        assert r.status_code == 403

    def test_admin_create_then_overlap_conflict(self):
        r = self.post(self.url, self.rate_body(), self.admin_token)
        assert r.status_code == 201, r.content
        assert r.json()["version"] == 1

        r = self.post(self.url, self.rate_body(rate="130.00"), self.admin_token)
        assert r.status_code == 409, r.content
        assert r.json()["overlap"] is True

        r = self.post(self.url + "?force=true", self.rate_body(rate="130.00"), self.admin_token)
        assert r.status_code == 201, r.content
        assert "warning" in r.json()

    def test_new_version_window_defaults_and_gaps_conflict(self):
        body = self.rate_body(agent="Asia Rail", rate="110.00")
        del body["valid_from"], body["valid_to"]

        r = self.post(self.url, body, self.admin_token)
        assert r.status_code == 201, r.content
        expected_start = self.window["valid_to"] + timedelta(days=1)
        assert r.json()["valid_from"] == expected_start.isoformat()

        gap_start = expected_start + timedelta(days=90)
        r = self.post(self.url, self.rate_body(agent="Asia Rail", valid_from=gap_start.isoformat(),
                                               valid_to=(gap_start + timedelta(days=30)).isoformat()),
                      self.admin_token)
        assert r.status_code == 409, r.content
        assert r.json()["overlap"] is False

    def test_update_bumps_version_and_audit_log_is_listed(self):
        created = self.post(self.url, self.rate_body(), self.admin_token).json()

        r = self.c.patch(f"{self.url}{created['id']}/", data=json.dumps({"rate": "125.00"}),
                         content_type="application/json", **self.auth(self.admin_token))
        assert r.status_code == 200, r.content
        assert r.json()["version"] == 2

        r = self.c.get("/api/pricing/audit-logs/",
                       {"entity_type": "portBorderFreight", "entity_id": created["id"]},
                       **self.auth(self.user_token))
        assert r.status_code == 200
        assert [log["action"] for log in r.json()] == ["update", "create"]

    def test_only_admins_delete_rates(self):
        rate = PortBorderFreight.objects.get(agent="Asia Rail")

        r = self.c.delete(f"{self.url}{rate.pk}/", **self.auth(self.user_token))
        assert r.status_code == 403

        r = self.c.delete(f"{self.url}{rate.pk}/", **self.auth(self.admin_token))
        assert r.status_code == 204
        assert FreightAuditLog.objects.filter(action="delete", entity_id=str(rate.pk)).exists()

    def test_reversed_window_rejected(self):
        body = self.rate_body(valid_from=self.window["valid_to"].isoformat(),
                              valid_to=self.window["valid_from"].isoformat())
        r = self.post(self.url, body, self.admin_token)
        assert r.status_code == 400

    def test_unbounded_weight_marker(self):
        body = {
            "agent": "Asia Rail", "min_weight": "1000", "max_weight": "999999", "surcharge": "40",
            "valid_from": self.window["valid_from"].isoformat(),
            "valid_to": self.window["valid_to"].isoformat(),
        }
        r = self.post("/api/pricing/weight-surcharges/", body, self.admin_token)
        assert r.status_code == 201, r.content
        assert r.json()["max_weight"] is None


class LookupEndpointTests(FreightApiTestCase):
    def test_sea_freight_options(self):
        r = self.c.get("/api/pricing/sea-freight-options", {"pol": "ICN", "pod": "QIN"}, **self.auth(self.user_token))
        assert r.status_code == 200
        assert [o["carrier"] for o in r.json()] == ["Harbor Marine"]

        r = self.c.get("/api/pricing/sea-freight-options", {"pol": "ICN"}, **self.auth(self.user_token))
        assert r.status_code == 400

    def test_validity_status(self):
        r = self.c.get(
            "/api/pricing/validity-status",
            {"valid_from": "2025-06-01", "valid_to": "2025-06-20", "date": "2025-06-15"},
            **self.auth(self.user_token),
        )
        assert r.status_code == 200
        assert r.json() == {"status": "expiring", "days_until_expiry": 5, "is_valid": True}

    def test_validity_status_rejects_bad_date(self):
        r = self.c.get("/api/pricing/validity-status", {"date": "soon"}, **self.auth(self.user_token))
        assert r.status_code == 400
