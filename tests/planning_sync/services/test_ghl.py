"""Tests for planning_sync.services.ghl — contact payload, delivery, connection test."""
import pytest
import requests
from datetime import datetime, timezone
from unittest.mock import patch, MagicMock

from planning_sync.models.client import ClientAccount
from planning_sync.models.lead import Lead
from planning_sync.services.ghl import (
    GhlClient,
    DeliveryError,
    build_contact_payload,
    type_slug,
    week_tag,
)


# ── Helpers ──────────────────────────────────────────────────────────────────

def _response(status=200, json_data=None, reason=''):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 400
    resp.reason = reason
    if isinstance(json_data, Exception):
        resp.json.side_effect = json_data
    else:
        resp.json.return_value = json_data
    return resp


@pytest.fixture
def account():
    return ClientAccount(
        id='client-1',
        company_name='Premium Extensions Ltd',
        ghl_api_key='key-abc',
        ghl_location_id='LOC_1',
        ghl_pipeline_id='PIPE_1',
        ghl_stage_id='STAGE_1',
        active=True,
    )


@pytest.fixture
def lead():
    return Lead(
        id='lead-1',
        client_id='client-1',
        external_reference='PA/2026/0042',
        address='45 Chelsea Square, London',
        postcode='SW3 5LF',
        description='Loft conversion with rear dormer',
        application_type='Full Planning',
        authority_name='Kensington and Chelsea',
        source_url='https://www.planit.org.uk/planapplic/PA_2026_0042/',
        agent_name='Vogue Architects',
    )


@pytest.fixture
def ghl():
    return GhlClient(base_url='https://ghl.test', api_version='2021-07-28')


MONDAY = datetime(2025, 12, 29, 9, 30, tzinfo=timezone.utc)


# ── week_tag ─────────────────────────────────────────────────────────────────

class TestWeekTag:
    """ISO-8601 week numbering, with the ISO (Thursday) year."""

    def test_monday_before_new_year_belongs_to_next_iso_year(self):
        assert week_tag(datetime(2025, 12, 29)) == '2026/1'

    def test_friday_after_new_year_belongs_to_previous_iso_year(self):
        assert week_tag(datetime(2021, 1, 1)) == '2020/53'

    def test_late_december_sunday_closes_week_51(self):
        assert week_tag(datetime(2024, 12, 22)) == '2024/51'

    def test_no_zero_padding(self):
        assert week_tag(datetime(2026, 1, 5)) == '2026/2'


# ── type_slug ────────────────────────────────────────────────────────────────

class TestTypeSlug:

    def test_lowercases_and_hyphenates(self):
        assert type_slug('Full Planning') == 'full-planning'

    def test_collapses_whitespace_runs(self):
        assert type_slug('Listed  Building\tConsent') == 'listed-building-consent'

    def test_empty_type(self):
        assert type_slug(None) == ''


# ── build_contact_payload ────────────────────────────────────────────────────

class TestBuildContactPayload:

    def test_maps_lead_fields(self, account, lead):
        payload = build_contact_payload(account, lead, MONDAY)

        assert payload['name'] == 'Vogue Architects'
        assert payload['address1'] == '45 Chelsea Square, London'
        assert payload['postalCode'] == 'SW3 5LF'
        assert payload['locationId'] == 'LOC_1'
        assert payload['pipelineId'] == 'PIPE_1'
        assert payload['stageId'] == 'STAGE_1'

    def test_tags_are_source_type_and_week(self, account, lead):
        payload = build_contact_payload(account, lead, MONDAY)

        assert payload['tags'] == ['planit', 'full-planning', '2026/1']

    def test_name_falls_back_without_agent(self, account, lead):
        lead.agent_name = None

        payload = build_contact_payload(account, lead, MONDAY)

        assert payload['name'] == 'Planning Application'

    def test_custom_fields_always_present(self, account, lead):
        lead.authority_name = None
        lead.source_url = ''

        fields = build_contact_payload(account, lead, MONDAY)['customFields']

        assert fields == [
            {'key': 'planning_reference', 'value': 'PA/2026/0042'},
            {'key': 'authority', 'value': ''},
            {'key': 'application_type', 'value': 'Full Planning'},
            {'key': 'source_url', 'value': ''},
        ]


# ── deliver ──────────────────────────────────────────────────────────────────

@patch('planning_sync.services.ghl.requests.post')
class TestDeliver:

    def test_returns_contact_id(self, mock_post, ghl, account, lead):
        mock_post.return_value = _response(201, {'contact': {'id': 'ghl-contact-9'}})

        assert ghl.deliver(account, lead, now=MONDAY) == 'ghl-contact-9'

    def test_posts_to_contacts_with_auth_headers(self, mock_post, ghl, account, lead):
        mock_post.return_value = _response(201, {'contact': {'id': 'x'}})

        ghl.deliver(account, lead, now=MONDAY)

        assert mock_post.call_args.args[0] == 'https://ghl.test/contacts/'
        headers = mock_post.call_args.kwargs['headers']
        assert headers['Authorization'] == 'Bearer key-abc'
        assert headers['Version'] == '2021-07-28'
        assert headers['Content-Type'] == 'application/json'
        assert mock_post.call_args.kwargs['json']['tags'][-1] == '2026/1'

    def test_error_response_raises_with_upstream_message(self, mock_post, ghl, account, lead):
        mock_post.return_value = _response(422, {'message': 'Invalid locationId'}, reason='Unprocessable Entity')

        with pytest.raises(DeliveryError) as exc:
            ghl.deliver(account, lead, now=MONDAY)

        assert 'Invalid locationId' in str(exc.value)
        assert exc.value.status_code == 422

    def test_error_without_json_body_uses_reason(self, mock_post, ghl, account, lead):
        mock_post.return_value = _response(502, ValueError('no json'), reason='Bad Gateway')

        with pytest.raises(DeliveryError, match='Bad Gateway'):
            ghl.deliver(account, lead, now=MONDAY)

    def test_transport_failure_raises_delivery_error(self, mock_post, ghl, account, lead):
        mock_post.side_effect = requests.exceptions.ConnectionError('connection refused')

        with pytest.raises(DeliveryError, match='connection refused'):
            ghl.deliver(account, lead, now=MONDAY)

    def test_success_without_contact_id_raises(self, mock_post, ghl, account, lead):
        mock_post.return_value = _response(200, {'ok': True})

        with pytest.raises(DeliveryError, match='contact.id'):
            ghl.deliver(account, lead, now=MONDAY)

    def test_null_contact_id_raises(self, mock_post, ghl, account, lead):
        mock_post.return_value = _response(201, {'contact': {'id': None}})

        with pytest.raises(DeliveryError, match='contact.id'):
            ghl.deliver(account, lead, now=MONDAY)


# ── test_connection ──────────────────────────────────────────────────────────

@patch('planning_sync.services.ghl.requests.get')
class TestTestConnection:

    def test_true_on_success(self, mock_get, ghl, account):
        mock_get.return_value = _response(200, {'location': {}})

        assert ghl.test_connection(account) is True
        assert mock_get.call_args.args[0] == 'https://ghl.test/locations/LOC_1'
        assert mock_get.call_args.kwargs['headers']['Authorization'] == 'Bearer key-abc'

    def test_false_on_unauthorized(self, mock_get, ghl, account):
        mock_get.return_value = _response(401)

        assert ghl.test_connection(account) is False

    def test_false_on_exception(self, mock_get, ghl, account):
        mock_get.side_effect = requests.exceptions.Timeout('slow')

        assert ghl.test_connection(account) is False
