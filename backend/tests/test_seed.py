# Overview: Pytest coverage for the demo fixture and its CLI commands.

from decimal import Decimal

from managefy.cli import list_users, seed
from managefy.models import (
    Business, Client, ErrorLog, Notification, Product, Sale, Supplier, User, UserRole,
)
from managefy.services import auth_service, seed_service


class TestSeed:

    def test_seed_inserts_fixture(self, db_session):
        assert seed_service.seed_demo_data() is True

        assert db_session.query(Business).count() == 2
        assert db_session.query(User).count() == 2
        assert db_session.query(Supplier).count() == 3
        assert db_session.query(Client).count() == 3
        assert db_session.query(Product).count() == 9
        assert db_session.query(Notification).count() == 4
        assert db_session.query(ErrorLog).count() == 2

        totals = sorted(sale.total_price for sale in db_session.query(Sale).all())
        assert totals == [Decimal('210.00'), Decimal('1584.00')]

    def test_every_seeded_business_has_one_manager(self, db_session):
        seed_service.seed_demo_data()

        for business in db_session.query(Business).all():
            managers = db_session.query(UserRole).filter_by(business_id=business.id, role='manager').count()
            assert managers == 1

    def test_seeded_user_can_log_in(self, db_session):
        seed_service.seed_demo_data()

        user, token = auth_service.login('johndoe@mail.com', 'Java1234')
        assert user.validated is True
        assert token

    def test_seed_refuses_populated_database(self, db_session, make_user):
        make_user('existing@mail.com')

        assert seed_service.seed_demo_data() is False
        assert db_session.query(Business).count() == 0

    def test_seed_twice_is_noop(self, db_session):
        seed_service.seed_demo_data()
        assert seed_service.seed_demo_data() is False
        assert db_session.query(User).count() == 2


class TestCli:

    def test_seed_command(self, app, db_session):
        result = app.test_cli_runner().invoke(seed)
        assert 'PASS' in result.output
        result = app.test_cli_runner().invoke(seed)
        assert 'SKIP' in result.output

    def test_users_list_command(self, app, db_session):
        seed_service.seed_demo_data()
        result = app.test_cli_runner().invoke(list_users)
        assert 'johndoe@mail.com' in result.output
        assert ':manager' in result.output
