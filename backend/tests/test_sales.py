# Overview: Pytest coverage for sale pricing, payments and the sale state machine.

"""
Sales Tests

Covers:
- Totals are recomputed from lines; client totals are ignored
- Line subtotal rounding and discount coefficients
- Initial state from the partial payment
- Partial payment route and state route transitions
- Cancellation and terminal states
- Line rewrites only while the sale is being paid
- Oversized quantities and amounts are rejected before they reach the columns
"""

from decimal import Decimal

import logging

import pytest

from managefy.errors import BadRequestError
from managefy.models import Sale
from managefy.services import sales_service
from managefy.validation import MAX_MONEY, require_money


@pytest.fixture
def catalog(client, manager, business, headers_for):
    """Two products (130 and 260) and one client in the business."""
    headers = headers_for(manager)
    soda = client.post('/api/products', headers=headers, json={
        'businessId': business.id, 'code': 'S01', 'name': 'Soda', 'unitCost': 100, 'unitPrice': 130,
    }).get_json()['data']
    egg = client.post('/api/products', headers=headers, json={
        'businessId': business.id, 'code': 'M01', 'name': 'Egg', 'unitCost': 200, 'unitPrice': 260,
    }).get_json()['data']
    buyer = client.post('/api/clients', headers=headers, json={
        'businessId': business.id, 'name': 'Nick',
    }).get_json()['data']
    return {'soda': soda['id'], 'egg': egg['id'], 'client': buyer['id']}


def _sale_payload(business, catalog, **extra):
    payload = {
        'businessId': business.id,
        'lines': [
            {'productId': catalog['soda'], 'qty': 1, 'unitPrice': 130},
            {'productId': catalog['egg'], 'qty': 6, 'unitPrice': 260, 'discount': 0.9},
        ],
    }
    payload.update(extra)
    return payload


def _create_sale(client, headers, business, catalog, **extra):
    resp = client.post('/api/sales', headers=headers, json=_sale_payload(business, catalog, **extra))
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()['data']


class TestSalePricing:

    def test_total_is_sum_of_discounted_lines(self, client, manager, business, catalog, headers_for):
        sale = _create_sale(client, headers_for(manager), business, catalog)

        assert sale['totalPrice'] == Decimal('1534')
        assert sale['state'] == 'PendingPayment'
        assert [line['lineNo'] for line in sale['lines']] == [1, 2]
        assert sale['lines'][1]['subtotal'] == Decimal('1404')

    def test_client_total_is_ignored(self, client, manager, business, catalog, headers_for):
        sale = _create_sale(client, headers_for(manager), business, catalog, totalPrice=1)
        assert sale['totalPrice'] == Decimal('1534')

    def test_unit_price_defaults_to_product_price(self, client, manager, business, catalog, headers_for):
        resp = client.post('/api/sales', headers=headers_for(manager), json={
            'businessId': business.id,
            'lines': [{'productId': catalog['egg'], 'quantity': 2}],
        })
        data = resp.get_json()['data']
        assert data['totalPrice'] == Decimal('520')
        assert data['lines'][0]['unitCost'] == Decimal('200')

    def test_subtotal_rounds_half_up(self, client, manager, business, catalog, headers_for):
        resp = client.post('/api/sales', headers=headers_for(manager), json={
            'businessId': business.id,
            'lines': [{'productId': catalog['soda'], 'qty': 1, 'unitPrice': '0.05', 'discount': '0.5'}],
        })
        assert resp.get_json()['data']['totalPrice'] == Decimal('0.03')

    def test_stored_total_matches_lines(self, client, manager, business, catalog, headers_for, db_session):
        sale_id = _create_sale(client, headers_for(manager), business, catalog)['id']
        sale = db_session.get(Sale, sale_id)
        assert sale.total_price == sum(line.subtotal for line in sale.lines)

    @pytest.mark.parametrize('line', [
        {'qty': 0},
        {'qty': 1.5},
        {'qty': 1, 'discount': 0},
        {'qty': 1, 'discount': 1.5},
        {'qty': 1, 'unitPrice': -1},
    ])
    def test_invalid_lines_are_bad_request(self, client, manager, business, catalog, headers_for, line):
        line = dict(line, productId=catalog['soda'])
        resp = client.post('/api/sales', headers=headers_for(manager), json={
            'businessId': business.id, 'lines': [line],
        })
        assert resp.status_code == 400

    def test_empty_lines_are_bad_request(self, client, manager, business, headers_for):
        resp = client.post('/api/sales', headers=headers_for(manager), json={
            'businessId': business.id, 'lines': [],
        })
        assert resp.status_code == 400

    def test_product_from_other_business_is_bad_request(
        self, client, manager, business, catalog, make_business, headers_for
    ):
        other = make_business(manager, 'other-shop/')
        resp = client.post('/api/sales', headers=headers_for(manager), json={
            'businessId': other.id, 'lines': [{'productId': catalog['soda'], 'qty': 1}],
        })
        assert resp.status_code == 400

    def test_collaborator_can_sell(self, client, business, catalog, make_user, add_member, headers_for):
        collaborator = make_user('collab@mail.com')
        add_member(collaborator, business, 'collaborator')
        _create_sale(client, headers_for(collaborator), business, catalog)


class TestPayments:

    def test_positive_initial_payment_starts_partial(self, client, manager, business, catalog, headers_for):
        sale = _create_sale(client, headers_for(manager), business, catalog, partialPayment=100)
        assert sale['state'] == 'PartialPayment'
        assert sale['partialPayment'] == Decimal('100')

    def test_initial_payment_above_total_is_bad_request(self, client, manager, business, catalog, headers_for):
        resp = client.post('/api/sales', headers=headers_for(manager),
                           json=_sale_payload(business, catalog, partialPayment=2000))
        assert resp.status_code == 400

    def test_full_payment_moves_to_payed(self, client, manager, business, catalog, headers_for):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog)

        resp = client.put(f"/api/sales/{sale['id']}/partialPayment/1534", headers=headers)
        assert resp.status_code == 200
        assert resp.get_json()['data']['state'] == 'Payed'

    def test_partial_payment_moves_to_partial(self, client, manager, business, catalog, headers_for):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog)

        resp = client.put(f"/api/sales/{sale['id']}/partialPayment/500.50", headers=headers)
        data = resp.get_json()['data']
        assert data['state'] == 'PartialPayment'
        assert data['partialPayment'] == Decimal('500.50')

    @pytest.mark.parametrize('amount', ['0', '1534.01', 'abc', '1.234', 'NaN', '1e40', '99999999999999999999999999999'])
    def test_invalid_payment_is_bad_request(self, client, manager, business, catalog, headers_for, amount):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog)

        resp = client.put(f"/api/sales/{sale['id']}/partialPayment/{amount}", headers=headers)
        assert resp.status_code == 400

    def test_no_payment_after_payed(self, client, manager, business, catalog, headers_for):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog)
        client.put(f"/api/sales/{sale['id']}/partialPayment/1534", headers=headers)

        resp = client.put(f"/api/sales/{sale['id']}/partialPayment/10", headers=headers)
        assert resp.status_code == 400


class TestStateMachine:

    def test_allowed_transitions(self):
        assert sales_service.can_transition('PendingPayment', 'PartialPayment')
        assert sales_service.can_transition('PendingPayment', 'Payed')
        assert sales_service.can_transition('PartialPayment', 'Payed')
        assert sales_service.can_transition('Payed', 'PayedAndBilled')
        assert not sales_service.can_transition('PartialPayment', 'PendingPayment')
        assert not sales_service.can_transition('Payed', 'PendingPayment')
        assert not sales_service.can_transition('Cancelled', 'PendingPayment')
        assert not sales_service.can_transition('PayedAndBilled', 'Cancelled')

    def test_state_names_are_case_insensitive(self):
        assert sales_service.parse_state('payedandbilled') == 'PayedAndBilled'
        with pytest.raises(BadRequestError):
            sales_service.parse_state('Refunded')

    def test_payed_to_pending_is_bad_request(self, client, manager, business, catalog, headers_for):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog)
        client.put(f"/api/sales/{sale['id']}/partialPayment/1534", headers=headers)

        resp = client.put(f"/api/sales/{sale['id']}/state/PendingPayment", headers=headers)
        assert resp.status_code == 400

    def test_state_route_to_payed_settles_payment(self, client, manager, business, catalog, headers_for):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog)

        resp = client.put(f"/api/sales/{sale['id']}/state/payed", headers=headers)
        data = resp.get_json()['data']
        assert data['state'] == 'Payed'
        assert data['partialPayment'] == data['totalPrice']

    def test_state_route_to_partial_needs_payment(self, client, manager, business, catalog, headers_for):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog)

        resp = client.put(f"/api/sales/{sale['id']}/state/PartialPayment", headers=headers)
        assert resp.status_code == 400

    def test_billed_sale_is_immutable(self, client, manager, business, catalog, headers_for):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog)
        client.put(f"/api/sales/{sale['id']}/state/Payed", headers=headers)
        assert client.put(f"/api/sales/{sale['id']}/state/PayedAndBilled", headers=headers).status_code == 200

        assert client.put(f"/api/sales/{sale['id']}/state/Cancelled", headers=headers).status_code == 400
        assert client.delete(f"/api/sales/{sale['id']}", headers=headers).status_code == 400
        resp = client.put(f"/api/sales/{sale['id']}", headers=headers, json={'partialPayment': 0})
        assert resp.status_code == 400

    def test_cancel_then_terminal(self, client, manager, business, catalog, headers_for):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog, partialPayment=10)

        resp = client.delete(f"/api/sales/{sale['id']}", headers=headers)
        assert resp.status_code == 200
        assert resp.get_json()['data']['state'] == 'Cancelled'

        assert client.put(f"/api/sales/{sale['id']}/state/Payed", headers=headers).status_code == 400
        assert client.delete(f"/api/sales/{sale['id']}", headers=headers).status_code == 400


class TestUpdateSale:

    def test_rewrite_lines_recomputes_total(self, client, manager, business, catalog, headers_for):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog)

        resp = client.put(f"/api/sales/{sale['id']}", headers=headers, json={
            'clientId': catalog['client'],
            'lines': [{'productId': catalog['soda'], 'qty': 2}],
        })
        data = resp.get_json()['data']
        assert resp.status_code == 200
        assert data['totalPrice'] == Decimal('260')
        assert data['clientId'] == catalog['client']
        assert len(data['lines']) == 1

    def test_shrinking_below_payment_is_bad_request(self, client, manager, business, catalog, headers_for):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog, partialPayment=1000)

        resp = client.put(f"/api/sales/{sale['id']}", headers=headers, json={
            'lines': [{'productId': catalog['soda'], 'qty': 1}],
        })
        assert resp.status_code == 400

    def test_clearing_payment_of_partial_sale_is_bad_request(
        self, client, manager, business, catalog, headers_for
    ):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog, partialPayment=100)

        resp = client.put(f"/api/sales/{sale['id']}", headers=headers, json={'partialPayment': None})
        assert resp.status_code == 400

    def test_payed_sale_lines_are_frozen(self, client, manager, business, catalog, headers_for):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog)
        client.put(f"/api/sales/{sale['id']}/state/Payed", headers=headers)

        resp = client.put(f"/api/sales/{sale['id']}", headers=headers, json={
            'lines': [{'productId': catalog['soda'], 'qty': 1}],
        })
        assert resp.status_code == 400


class TestSaleReads:

    def test_list_and_get(self, client, manager, business, catalog, headers_for):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog)

        listed = client.get(f'/api/sales?businessId={business.id}', headers=headers).get_json()['data']
        assert [s['id'] for s in listed] == [sale['id']]
        assert client.get(f"/api/sales/{sale['id']}", headers=headers).get_json()['data']['id'] == sale['id']

    def test_interval(self, client, manager, business, catalog, headers_for):
        headers = headers_for(manager)
        sale = _create_sale(client, headers, business, catalog)

        resp = client.get(
            f'/api/sales/interval?businessId={business.id}&from=2000-01-01T00:00:00Z&to=2999-01-01T00:00:00Z',
            headers=headers,
        )
        assert [s['id'] for s in resp.get_json()['data']] == [sale['id']]

        resp = client.get(
            f'/api/sales/interval?businessId={business.id}&from=2999-01-01T00:00:00Z&to=2000-01-01T00:00:00Z',
            headers=headers,
        )
        assert resp.status_code == 400

    def test_outsider_cannot_read_sale(self, client, manager, business, catalog, make_user, headers_for):
        sale = _create_sale(client, headers_for(manager), business, catalog)
        outsider = make_user('outsider@mail.com')

        assert client.get(f"/api/sales/{sale['id']}", headers=headers_for(outsider)).status_code == 401


class TestAmountLimits:

    def test_require_money_range_checked_before_rounding(self):
        with pytest.raises(BadRequestError):
            require_money('1e40', 'amount')
        with pytest.raises(BadRequestError):
            require_money('-1e40', 'amount')
        assert require_money('9999999999.99', 'amount') == MAX_MONEY

    def test_huge_quantity_is_bad_request(self, client, manager, business, catalog, headers_for):
        resp = client.post('/api/sales', headers=headers_for(manager), json={
            'businessId': business.id,
            'lines': [{'productId': catalog['soda'], 'qty': 10 ** 30}],
        })
        assert resp.status_code == 400

    def test_huge_unit_price_is_bad_request(self, client, manager, business, catalog, headers_for):
        resp = client.post('/api/sales', headers=headers_for(manager), json={
            'businessId': business.id,
            'lines': [{'productId': catalog['soda'], 'qty': 1, 'unitPrice': 1e40}],
        })
        assert resp.status_code == 400

    def test_line_subtotal_over_limit_is_bad_request(self, client, manager, business, catalog, headers_for):
        resp = client.post('/api/sales', headers=headers_for(manager), json={
            'businessId': business.id,
            'lines': [{'productId': catalog['soda'], 'qty': 1000, 'unitPrice': '9999999999'}],
        })
        assert resp.status_code == 400
        assert 'subtotal' in resp.get_json()['message']

    def test_sale_total_over_limit_is_bad_request(self, client, manager, business, catalog, headers_for, db_session):
        resp = client.post('/api/sales', headers=headers_for(manager), json={
            'businessId': business.id,
            'lines': [
                {'productId': catalog['soda'], 'qty': 1, 'unitPrice': '6000000000'},
                {'productId': catalog['egg'], 'qty': 1, 'unitPrice': '6000000000'},
            ],
        })
        assert resp.status_code == 400
        assert db_session.query(Sale).count() == 0

    def test_huge_partial_payment_on_create_is_bad_request(self, client, manager, business, catalog, headers_for):
        resp = client.post(
            '/api/sales', headers=headers_for(manager),
            json=_sale_payload(business, catalog, partialPayment=1e40),
        )
        assert resp.status_code == 400


class TestSaleRecord:

    def test_date_is_stored_as_naive_utc(self, client, manager, business, catalog, headers_for, db_session):
        sale = _create_sale(client, headers_for(manager), business, catalog)

        assert Sale.__table__.c.date.type.timezone is False
        stored = db_session.get(Sale, sale['id'])
        assert stored.date.tzinfo is None
        assert sale['date'].endswith('Z')

    def test_creation_is_logged_on_app_logger(self, app, client, manager, business, catalog, headers_for, caplog):
        with caplog.at_level(logging.INFO, logger=app.logger.name):
            sale = _create_sale(client, headers_for(manager), business, catalog)

        assert f"Sale {sale['id']} created in business {business.id}" in caplog.text
