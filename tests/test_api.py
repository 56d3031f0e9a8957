from conftest import FakeRegistryClient
from package_analytics.analyzer import PackageAnalyzer
from package_analytics.api import GENERIC_ERROR, handle_analyze_request
from package_analytics.errors import RegistryUnavailable


def test_success_returns_report(client, clock):
    analyzer = PackageAnalyzer(client=client, clock=clock)

    status, body = handle_analyze_request(
        {"packageName": "left-pad", "packageVersion": "1.3.0"}, analyzer
    )

    assert status == 200
    assert body["packageInfo"]["name"] == "left-pad"
    assert body["downloads"]["total"] == 750


def test_plain_keys_are_accepted(client, clock):
    analyzer = PackageAnalyzer(client=client, clock=clock)

    status, _ = handle_analyze_request({"name": "left-pad", "version": "1.3.0"}, analyzer)

    assert status == 200


def test_missing_fields_are_client_errors(client, clock):
    analyzer = PackageAnalyzer(client=client, clock=clock)

    for payload in ({}, None, {"packageName": "left-pad"}, {"packageVersion": "1.0.0"}):
        status, body = handle_analyze_request(payload, analyzer)
        assert status == 400
        assert list(body) == ["error"]

    assert client.calls == []


def test_registry_failure_is_generic_server_error(clock):
    client = FakeRegistryClient(
        failures={"audit": RegistryUnavailable("secret internal detail http://10.0.0.1")}
    )
    analyzer = PackageAnalyzer(client=client, clock=clock)

    status, body = handle_analyze_request(
        {"packageName": "left-pad", "packageVersion": "1.3.0"}, analyzer
    )

    assert status == 500
    assert body == {"error": GENERIC_ERROR}


def test_non_object_body_is_client_error(client, clock):
    analyzer = PackageAnalyzer(client=client, clock=clock)

    for payload in (["left-pad", "1.3.0"], "left-pad@1.3.0", 42):
        status, body = handle_analyze_request(payload, analyzer)
        assert status == 400
        assert list(body) == ["error"]

    assert client.calls == []


class BrokenAnalyzer:
    def analyze(self, package_name, package_version):
        raise TypeError("int() argument must be a string, not 'NoneType'")


def test_unexpected_error_is_generic_server_error():
    status, body = handle_analyze_request(
        {"packageName": "left-pad", "packageVersion": "1.3.0"}, BrokenAnalyzer()
    )

    assert status == 500
    assert body == {"error": GENERIC_ERROR}
