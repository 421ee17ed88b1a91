import pytest
import requests

from cakeshop.services.notifier import StaffNotifier


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code


class FakeHttp:
    def __init__(self, status_code=200, error=None):
        self.status_code = status_code
        self.error = error
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append({"url": url, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return FakeResponse(self.status_code)


def make_notifier(http, url="https://push.example.com/send"):
    return StaffNotifier(url, topic="store_orders", timeout=2.5, http=http)


def send(notifier):
    return notifier.notify_new_order(order_id="abc", order_number="20250109001", name="Asha", total=370.0)


def test_posts_message_to_topic():
    http = FakeHttp()
    assert send(make_notifier(http)) is True

    (post,) = http.posts
    assert post["url"] == "https://push.example.com/send"
    assert post["timeout"] == 2.5
    assert post["json"] == {
        "topic": "store_orders",
        "notification": {"title": "New Order Received!", "body": "Order #20250109001 - Asha (₹370)"},
        "data": {"orderId": "abc", "orderNumber": "20250109001"},
    }


def test_fractional_totals_keep_their_paise():
    message = make_notifier(FakeHttp()).build_message(order_id="x", order_number="1", name="Ravi", total=12.5)
    assert message["notification"]["body"] == "Order #1 - Ravi (₹12.5)"


def test_skipped_without_webhook():
    http = FakeHttp()
    assert send(make_notifier(http, url=None)) is False
    assert http.posts == []


@pytest.mark.parametrize(
    "http",
    [
        FakeHttp(error=requests.exceptions.Timeout("slow")),
        FakeHttp(error=requests.exceptions.ConnectionError("refused")),
        FakeHttp(error=RuntimeError("boom")),
        FakeHttp(status_code=500),
        FakeHttp(status_code=401),
    ],
)
def test_failures_are_reported_not_raised(http):
    assert send(make_notifier(http)) is False
    assert len(http.posts) == 1
