"""
Unit tests for ARM resource identifier parsing.

Test Coverage:
- Bare names
- Full and URL-encoded ARM paths
- Expected-type checks (case-insensitive, nested types)
- Missing resource group / name segments
- resource_name() normalization
"""

from urllib.parse import quote

import pytest

from azprovision.exceptions import (
    ContractViolationError,
    MalformedIdentifierError,
    MissingResourceGroupError,
    MissingResourceNameError,
    UnexpectedResourceTypeError,
)
from azprovision.resource_id import ResourceIdentifier, parse_resource_id, resource_name

NIC_PATH = (
    "/subscriptions/11111111-2222-3333-4444-555555555555/resourceGroups/rg1"
    "/providers/Microsoft.Network/networkInterfaces/nic1"
)

# ============================================================================
# PARSING TESTS
# ============================================================================


class TestParseResourceId:
    """Test parse_resource_id()."""

    def test_parses_full_path(self):
        """Test every component is extracted from a full ARM path."""
        rid = parse_resource_id(NIC_PATH)

        assert rid == ResourceIdentifier(
            name="nic1",
            resource_group="rg1",
            subscription_id="11111111-2222-3333-4444-555555555555",
            provider_namespace="Microsoft.Network",
            resource_type="networkInterfaces",
        )
        assert rid.is_bare_name is False

    def test_bare_name_returned_as_is(self):
        """Test a value without separators is a bare name."""
        rid = parse_resource_id("  my-nic  ")

        assert rid.name == "my-nic"
        assert rid.resource_group is None
        assert rid.is_bare_name is True

    def test_url_encoded_path_matches_decoded(self):
        """Test parsing is stable under URL-encoding."""
        encoded = quote(NIC_PATH, safe="")

        assert "/" not in encoded
        assert parse_resource_id(encoded, "networkInterfaces") == parse_resource_id(
            NIC_PATH, "networkInterfaces"
        )

    def test_trailing_separator_tolerated(self):
        rid = parse_resource_id(NIC_PATH + "/")

        assert rid.name == "nic1"

    def test_nested_resource_type(self):
        """Test child resources join their type segments."""
        subnet_path = (
            "/subscriptions/s/resourceGroups/rg1/providers/Microsoft.Network"
            "/virtualNetworks/vnet1/subnets/sub1"
        )

        rid = parse_resource_id(subnet_path, "subnets")

        assert rid.name == "sub1"
        assert rid.resource_type == "virtualNetworks/subnets"

    def test_expected_type_is_case_insensitive(self):
        rid = parse_resource_id(NIC_PATH, "NETWORKINTERFACES")

        assert rid.name == "nic1"

    def test_expected_type_with_namespace(self):
        rid = parse_resource_id(NIC_PATH, "Microsoft.Network/networkInterfaces")

        assert rid.resource_group == "rg1"

    def test_resource_group_segment_is_case_insensitive(self):
        rid = parse_resource_id(NIC_PATH.replace("resourceGroups", "RESOURCEGROUPS"))

        assert rid.resource_group == "rg1"


# ============================================================================
# ERROR TESTS
# ============================================================================


class TestParseResourceIdErrors:
    """Test parse failures are classified."""

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_value(self, value):
        with pytest.raises(MalformedIdentifierError):
            parse_resource_id(value)

    def test_single_segment_path(self):
        with pytest.raises(MalformedIdentifierError):
            parse_resource_id("/nic1/")

    def test_unexpected_type(self):
        """Test a path without the expected type segment is rejected."""
        with pytest.raises(UnexpectedResourceTypeError) as exc_info:
            parse_resource_id("not-a-path-at-all-but/has/slash", "networkInterfaces")

        assert exc_info.value.kind == "UnexpectedResourceType"

    def test_public_ip_path_is_not_a_nic(self):
        path = NIC_PATH.replace("networkInterfaces", "publicIPAddresses")

        with pytest.raises(UnexpectedResourceTypeError):
            parse_resource_id(path, "networkInterfaces")

    def test_missing_resource_group(self):
        with pytest.raises(MissingResourceGroupError):
            parse_resource_id("/subscriptions/s/providers/Microsoft.Network/networkInterfaces/nic1")

    def test_empty_resource_group(self):
        with pytest.raises(MissingResourceGroupError):
            parse_resource_id(
                "/subscriptions/s/resourceGroups//providers/Microsoft.Network/networkInterfaces/nic1"
            )

    def test_empty_resource_name(self):
        with pytest.raises(MissingResourceNameError):
            parse_resource_id("/subscriptions/s/resourceGroups/rg1/providers/x/y/ /")

    def test_errors_are_contract_violations(self):
        with pytest.raises(ContractViolationError):
            parse_resource_id("")


# ============================================================================
# NAME NORMALIZATION TESTS
# ============================================================================


class TestResourceName:
    """Test resource_name()."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("vnet1", "vnet1"),
            ("  vnet1  ", "vnet1"),
            ("", ""),
            (None, ""),
            ("/subscriptions/s/resourceGroups/rg/providers/Microsoft.Network/virtualNetworks/vnet1", "vnet1"),
            ("%2Fsubscriptions%2Fs%2FresourceGroups%2Frg%2Fproviders%2FMicrosoft.Network%2FvirtualNetworks%2Fvnet1", "vnet1"),
            ("vnet1/", "vnet1"),
        ],
    )
    def test_trailing_segment(self, value, expected):
        assert resource_name(value) == expected
