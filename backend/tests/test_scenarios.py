# Overview: End-to-end API scenarios across identity, roles and sales.

"""
End-to-end scenarios

- register then login yields the same user
- an admin cannot grant the admin role
- sale pricing with a discounted line, then full payment
- manager transfer happens once
- an email can only be registered once
"""

from decimal import Decimal

import jwt

from managefy.models import User, UserRole
from managefy.services import auth_service


def _register(client, email, password='Pass1234', name='Someone'):
    return client.post('/api/users/register', json={'email': email, 'password': password, 'name': name})


def _bearer(token):
    return {'Authorization': f'Bearer {token}'}


class TestScenarios:

    def test_register_then_login(self, client, db_session):
        registered = _register(client, 'a@b.co', name='A')
        assert registered.status_code == 200
        token = registered.get_json()['data']['token']

        logged_in = client.post('/api/users/login', json={'email': 'a@b.co', 'password': 'Pass1234'})
        assert logged_in.status_code == 200
        login_token = logged_in.get_json()['data']['token']

        registered_sub = jwt.decode(token, options={'verify_signature': False})['sub']
        login_sub = jwt.decode(login_token, options={'verify_signature': False})['sub']
        assert registered_sub == login_sub

    def test_admin_cannot_create_admin(self, client, db_session):
        t1 = _register(client, 'u1@mail.com').get_json()['data']['token']
        u2 = _register(client, 'u2@mail.com').get_json()['data']
        u3 = _register(client, 'u3@mail.com').get_json()['data']

        business_id = client.post('/api/businesses', headers=_bearer(t1), json={
            'name': 'B', 'urlSlug': 'b/'
        }).get_json()['data']['id']

        resp = client.post('/api/userRoles', headers=_bearer(t1), json={
            'userId': u2['userId'], 'businessId': business_id, 'role': 'admin'
        })
        assert resp.status_code == 200

        resp = client.post('/api/userRoles', headers=_bearer(u2['token']), json={
            'userId': u3['userId'], 'businessId': business_id, 'role': 'admin'
        })
        assert resp.status_code == 401

    def test_sale_pricing_then_full_payment(self, client, db_session):
        token = _register(client, 'seller@mail.com').get_json()['data']['token']
        headers = _bearer(token)
        business_id = client.post('/api/businesses', headers=headers, json={
            'name': 'Shop', 'urlSlug': 'shop/'
        }).get_json()['data']['id']
        product_ids = [
            client.post('/api/products', headers=headers, json={
                'businessId': business_id, 'code': code, 'name': code, 'unitCost': cost, 'unitPrice': price,
            }).get_json()['data']['id']
            for code, cost, price in (('A', 100, 130), ('B', 200, 260))
        ]

        resp = client.post('/api/sales', headers=headers, json={
            'businessId': business_id,
            'lines': [
                {'productId': product_ids[0], 'qty': 1, 'unitPrice': 130},
                {'productId': product_ids[1], 'qty': 6, 'unitPrice': 260, 'discount': 0.9},
            ],
        })
        sale = resp.get_json()['data']
        assert sale['totalPrice'] == Decimal('1534.0')
        assert sale['state'] == 'PendingPayment'

        resp = client.put(f"/api/sales/{sale['id']}/partialPayment/1534", headers=headers)
        assert resp.get_json()['data']['state'] == 'Payed'

        resp = client.put(f"/api/sales/{sale['id']}/state/PendingPayment", headers=headers)
        assert resp.status_code == 400

    def test_manager_transfer_happens_once(self, client, db_session):
        manager = _register(client, 'm@mail.com').get_json()['data']
        admin = _register(client, 'adm@mail.com').get_json()['data']
        headers = _bearer(manager['token'])
        business_id = client.post('/api/businesses', headers=headers, json={
            'name': 'B', 'urlSlug': 'b/'
        }).get_json()['data']['id']
        client.post('/api/userRoles', headers=headers, json={
            'userId': admin['userId'], 'businessId': business_id, 'role': 'admin'
        })

        payload = {'userId': admin['userId'], 'businessId': business_id}
        assert client.put('/api/userRoles/transfer', headers=headers, json=payload).status_code == 200

        roles = {ur.user_id: ur.role for ur in db_session.query(UserRole).filter_by(business_id=business_id)}
        assert roles == {admin['userId']: 'manager', manager['userId']: 'admin'}

        assert client.put('/api/userRoles/transfer', headers=headers, json=payload).status_code == 401

    def test_email_registered_once(self, client, db_session):
        statuses = sorted(_register(client, 'same@mail.com').status_code for _ in range(2))

        assert statuses == [200, 400]
        assert db_session.query(User).filter_by(email='same@mail.com').count() == 1

    def test_unique_constraint_backs_the_email_check(self, client, db_session, monkeypatch):
        """A racing insert that slips past the lookup still ends as a 400 via the constraint."""
        assert _register(client, 'race@mail.com').status_code == 200

        class _NoMatch:
            def filter(self, *args, **kwargs):
                return self

            def first(self):
                return None

        real_query = db_session.query

        def query(*entities, **kwargs):
            if entities == (User,):
                return _NoMatch()
            return real_query(*entities, **kwargs)

        monkeypatch.setattr(auth_service.db.session, 'query', query)
        resp = _register(client, 'race@mail.com')
        monkeypatch.undo()

        assert resp.status_code == 400
        assert db_session.query(User).filter_by(email='race@mail.com').count() == 1
