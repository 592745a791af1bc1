"""Tests for resource selection."""

from unittest.mock import MagicMock

import pytest

from status_transformer.engine.selector import select_resources
from status_transformer.errors import MatchEvaluationError, ResourceAccessError
from status_transformer.input import Matcher, ResourceMatcher
from status_transformer.resources import COMPOSITE_RESOURCE_KEY, ExtraResource, ObservedObject


def make_matcher(*names: str, **kwargs) -> Matcher:
    """Create a matcher selecting the given resource name patterns."""
    return Matcher(resources=[ResourceMatcher(name=n) for n in names], **kwargs)


@pytest.fixture
def observed():
    """Create observed resources keyed by name."""
    return {key: ObservedObject(id=key) for key in ["bucket-a", "bucket-b", "database", "my-bucket-policy"]}


@pytest.fixture
def composite():
    """Create a composite resource."""
    return ObservedObject(id=COMPOSITE_RESOURCE_KEY, kind="XStorage", name="storage")


@pytest.fixture
def extra():
    """Create extra resources."""
    return [
        ExtraResource(
            into="envs",
            obj=ObservedObject(
                id="envs[0]",
                api_version="apiextensions.crossplane.io/v1alpha1",
                kind="EnvironmentConfig",
                name="prod",
            ),
        ),
        ExtraResource(
            into="secrets",
            obj=ObservedObject(id="secrets[0]", api_version="v1", kind="Secret", namespace="default", name="creds"),
        ),
    ]


class TestSelectResources:
    """Test selecting resources for a matcher."""

    def test_exact_name(self, observed):
        """Test that a plain name selects the resource with that key."""
        selected = select_resources(make_matcher("database"), observed)
        assert list(selected) == ["database"]

    def test_pattern_is_unanchored(self, observed):
        """Test that name patterns are searched anywhere in the key."""
        selected = select_resources(make_matcher("bucket"), observed)
        assert sorted(selected) == ["bucket-a", "bucket-b", "my-bucket-policy"]

    def test_anchored_pattern(self, observed):
        """Test that anchors restrict matching."""
        selected = select_resources(make_matcher("^bucket-.$"), observed)
        assert sorted(selected) == ["bucket-a", "bucket-b"]

    def test_union_of_patterns(self, observed):
        """Test that several patterns select the union of their matches."""
        selected = select_resources(make_matcher("bucket-a", "database"), observed)
        assert sorted(selected) == ["bucket-a", "database"]

    def test_no_match(self, observed):
        """Test that an unmatched pattern yields an empty selection."""
        assert select_resources(make_matcher("queue"), observed) == {}

    def test_invalid_pattern_reports_index(self, observed):
        """Test that an invalid pattern raises with the resources index."""
        with pytest.raises(MatchEvaluationError) as exc_info:
            select_resources(make_matcher("database", "("), observed)

        assert str(exc_info.value).startswith("cannot compile resource key regex, resourcesIndex: 1: ")

    def test_composite_excluded_by_default(self, observed, composite):
        """Test that the composite is not selected unless requested."""
        selected = select_resources(make_matcher("database"), observed, composite)
        assert COMPOSITE_RESOURCE_KEY not in selected

    def test_include_composite(self, observed, composite):
        """Test that the composite is added under the reserved key."""
        selected = select_resources(
            make_matcher("database", include_composite_as_resource=True), observed, composite
        )

        assert selected[COMPOSITE_RESOURCE_KEY] is composite
        assert "database" in selected

    def test_include_composite_without_resources(self, observed, composite):
        """Test that the composite alone can be selected."""
        selected = select_resources(make_matcher(include_composite_as_resource=True), observed, composite)
        assert list(selected) == [COMPOSITE_RESOURCE_KEY]

    def test_extra_resources_not_loaded_unless_requested(self, observed, extra):
        """Test that the extra resources provider is not called unless requested."""
        provider = MagicMock(return_value=extra)

        select_resources(make_matcher("envs"), observed, extra_resources=provider)

        provider.assert_not_called()

    def test_extra_resources_matched_by_key(self, observed, extra):
        """Test that extra resources are matched against their composite key."""
        selected = select_resources(
            make_matcher(r"^extra-resource\.envs\.", include_extra_resources=True),
            observed,
            extra_resources=lambda: extra,
        )

        assert list(selected) == ["extra-resource.envs.apiextensions.crossplane.io.EnvironmentConfig..prod"]
        assert selected["extra-resource.envs.apiextensions.crossplane.io.EnvironmentConfig..prod"] is extra[0].obj

    def test_extra_resource_core_group_key(self, observed, extra):
        """Test that core group resources have an empty group in their key."""
        selected = select_resources(
            make_matcher("creds", include_extra_resources=True), observed, extra_resources=lambda: extra
        )
        assert list(selected) == ["extra-resource.secrets..Secret.default.creds"]

    def test_extra_resources_error_propagates(self, observed):
        """Test that extra resource loading errors propagate."""

        def broken():
            raise ResourceAccessError("unexpected extra-resources type: str")

        with pytest.raises(ResourceAccessError):
            select_resources(make_matcher("x", include_extra_resources=True), observed, extra_resources=broken)
