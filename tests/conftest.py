from decimal import Decimal

import pytest

from cakeshop import create_app
from cakeshop.common.db.seed import seed_defaults
from cakeshop.config import AppConfig


class RecordingNotifier:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def notify_new_order(self, **kwargs):
        self.calls.append(kwargs)
        return not self.fail


@pytest.fixture()
def config(tmp_path):
    return AppConfig(
        database_url=f"sqlite:///{tmp_path}/test.db",  # use sqlite for tests
        secret_key="test",
        log_level="ERROR",
        currency="INR",
        public_base_url="http://testserver",
        upload_dir=tmp_path / "uploads",
        cancel_window_seconds=30,
        toy_promotion_min_weight=Decimal("4"),
    )


@pytest.fixture()
def app(config):
    app = create_app(config)
    app.config.update({"TESTING": True})
    components = app.extensions["cakeshop_components"]
    seed_defaults(components["database"].session)
    yield app
    components["database"].dispose()


@pytest.fixture()
def components(app):
    return app.extensions["cakeshop_components"]


@pytest.fixture()
def notifier(components):
    recorder = RecordingNotifier()
    components["order_service"]._notifier = recorder
    return recorder


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client
