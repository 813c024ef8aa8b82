import pytest

from core.config import DIRECT_ENDPOINTS
from core.exceptions import ConfigurationError
from core.router import RouteClass, RouteDecider, RouteDecision
from core.transform import PathRewriter


@pytest.fixture
def decider():
    return RouteDecider("/c2", DIRECT_ENDPOINTS)


class TestRouteDecider:
    @pytest.mark.parametrize("path", ["/c2", "/c2/", "/c2/beacon", "/c2/a/b/c"])
    def test_prefix_routes(self, decider, path):
        assert decider.decide("POST", path).route == RouteClass.PREFIX_PROXY

    @pytest.mark.parametrize("path", ["/C2", "/C2/x", "/c2/X"])
    def test_prefix_any_case(self, decider, path):
        assert decider.decide("GET", path).route == RouteClass.PREFIX_PROXY

    def test_mixed_case_mount_prefix(self):
        decider = RouteDecider("/Agents", [])
        assert decider.decide("GET", "/agents/x").route == RouteClass.PREFIX_PROXY

    @pytest.mark.parametrize("path", ["/c2x", "/c22/beacon", "/x/c2/beacon"])
    def test_prefix_requires_segment_boundary(self, decider, path):
        assert decider.decide("GET", path).route == RouteClass.CATCH_ALL

    @pytest.mark.parametrize(
        "path",
        [
            "/uploadexe",
            "/Uploaddll",
            "/UPLOADPAYLOAD",
            "/uPlOaDlOaDeR",
            "/getexe/",
            "/GetDll/extra",
            "/GETPAYLOAD",
        ],
    )
    def test_direct_endpoints_any_case(self, decider, path):
        assert decider.decide("GET", path).route == RouteClass.DIRECT_PROXY

    @pytest.mark.parametrize("path", ["/uploadexe2", "/getexes", "/get/exe"])
    def test_direct_endpoints_need_exact_name(self, decider, path):
        assert decider.decide("GET", path).route == RouteClass.CATCH_ALL

    @pytest.mark.parametrize("method", ["GET", "HEAD", "get"])
    def test_root_for_safe_methods(self, decider, method):
        assert decider.decide(method, "/").route == RouteClass.ROOT

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
    def test_root_other_methods_fall_through(self, decider, method):
        assert decider.decide(method, "/").route == RouteClass.CATCH_ALL

    def test_prefix_normalized(self):
        decider = RouteDecider("c2/", [])
        assert decider.decide("GET", "/c2/x").route == RouteClass.PREFIX_PROXY

    def test_is_proxied(self, decider):
        assert decider.decide("GET", "/c2/x").is_proxied
        assert decider.decide("GET", "/getexe").is_proxied
        assert not decider.decide("GET", "/").is_proxied
        assert not decider.decide("GET", "/nonexistent").is_proxied


class TestPathRewriter:
    @pytest.fixture
    def rewriter(self):
        return PathRewriter("/c2")

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/c2/beacon", "/beacon"),
            ("/c2/Tasks/ID-42", "/Tasks/ID-42"),
            ("/c2/a%20b", "/a%20b"),
            ("/c2/", "/"),
            ("/C2/Beacon", "/Beacon"),
            ("/C2", "/"),
            ("/c2", "/"),
        ],
    )
    def test_prefix_strip(self, rewriter, path, expected):
        decision = RouteDecision(RouteClass.PREFIX_PROXY, path)
        assert rewriter.rewrite(decision) == expected

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/UploadExe", "/uploadexe"),
            ("/GETPAYLOAD/Build-7", "/getpayload/build-7"),
            ("/getdll", "/getdll"),
        ],
    )
    def test_direct_lowercase(self, rewriter, path, expected):
        decision = RouteDecision(RouteClass.DIRECT_PROXY, path)
        assert rewriter.rewrite(decision) == expected

    def test_other_routes_unchanged(self, rewriter):
        decision = RouteDecision(RouteClass.CATCH_ALL, "/Other")
        assert rewriter.rewrite(decision) == "/Other"

    def test_strip_prefix_leaves_foreign_paths(self):
        assert PathRewriter.strip_prefix("/other", "/c2") == "/other"


@pytest.mark.parametrize("prefix", ["/", "", "//"])
def test_root_mount_prefix_rejected(prefix):
    with pytest.raises(ConfigurationError):
        RouteDecider(prefix, DIRECT_ENDPOINTS)
