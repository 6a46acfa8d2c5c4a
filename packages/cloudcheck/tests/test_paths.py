from __future__ import annotations

import pytest
from cloudcheck.models import Edition
from cloudcheck.paths import (
    classify_edition,
    fix_drive_shortcut,
    fix_well_known_mail_folders,
    normalize_parameters,
    normalize_path,
    split_segments,
    strip_edition_prefix,
)


def test_key_as_parens_and_host_prefix_normalize_to_id_segments() -> None:
    raw = "https://graph.microsoft.com/v1.0/users('{user-id}')/messages/{message-id}"
    assert normalize_path(raw) == "/users/{id}/messages/{id}"


def test_key_as_parens_on_every_segment() -> None:
    assert normalize_path("/users('{id}')/messages('{id}')") == "/users/{id}/messages/{id}"
    assert normalize_path("/groups('abc')/members") == "/groups/{id}/members"


def test_function_parameters_are_quoted_and_named() -> None:
    raw = "/communications/callRecords/getPstnCalls(fromDateTime={fromDateTime},toDateTime={toDateTime})"
    assert normalize_path(raw) == (
        "/communications/callRecords/getPstnCalls(fromDateTime='{fromDateTime}',toDateTime='{toDateTime}')"
    )


def test_parameter_values_are_replaced_by_their_names() -> None:
    path = (
        "/identityGovernance/entitlementManagement/assignments/"
        "additionalAccess(accessPackageId='parameterValue',incompatibleAccessPackageId='parameterValue')"
    )
    assert normalize_parameters(path) == (
        "/identityGovernance/entitlementManagement/assignments/"
        "additionalAccess(accessPackageId='{accessPackageId}',"
        "incompatibleAccessPackageId='{incompatibleAccessPackageId}')"
    )


def test_query_parameter_aliases_keep_the_at_form() -> None:
    assert normalize_parameters("/reports/getEmailActivityCounts(period=@p)") == (
        "/reports/getEmailActivityCounts(period='@period')"
    )


def test_calls_without_parameters_are_left_alone() -> None:
    assert normalize_path("/users/delta()") == "/users/delta()"
    assert normalize_path("/me/drive/items/{id}/workbook/worksheets/{id}/range(address='A1:B2')") == (
        "/drives/{id}/items/{id}/workbook/worksheets/{id}/range(address='{address}')"
    )


def test_drive_shortcut_is_rewritten_to_drive_by_id() -> None:
    assert fix_drive_shortcut("/drive/bundles/{id}/children") == "/drives/{id}/bundles/{id}/children"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("/me/drive/root/children", "/drives/{id}/root/children"),
        ("/users/{user-id}/drive/root/children", "/drives/{id}/root/children"),
        ("/me/drive/root:/{item-path}:/content", "/drives/{id}/items/{id}/content"),
        ("/shares/{encoded-sharing-url}/driveItem", "/shares/{id}/driveItem"),
        ("/sites/{site-id}/drive", "/sites/{id}/drive"),
    ],
)
def test_drive_paths_are_canonical(raw: str, expected: str) -> None:
    assert normalize_path(raw) == expected


def test_chart_name_key_becomes_an_id() -> None:
    raw = "/me/drive/items/{id}/workbook/worksheets/{id|name}/charts/{name}"
    assert normalize_path(raw) == "/drives/{id}/items/{id}/workbook/worksheets/{id}/charts/{id}"


def test_name_placeholder_prefix_is_not_rewritten() -> None:
    assert normalize_path("/schemaExtensions/{namespace}") == "/schemaExtensions/{namespace}"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("/me/mailFolders/inbox/messages", "/me/mailFolders/{id}/messages"),
        ("/users/{id}/mailfolders/sentitems/messages/delta()", "/users/{id}/mailFolders/{id}/messages/delta()"),
        ("/me/mailFolders/{id}/messages", "/me/mailFolders/{id}/messages"),
        ("/me/mailFolders/inbox", "/me/mailFolders/inbox"),
    ],
)
def test_well_known_mail_folders(raw: str, expected: str) -> None:
    assert fix_well_known_mail_folders(raw) == expected


def test_identifier_spellings_collapse() -> None:
    assert normalize_path("/users/{id | userPrincipalName}/messages/{message-id}") == "/users/{id}/messages/{id}"
    assert normalize_path("/groups/{groupId}/members/{ID}") == "/groups/{id}/members/{id}"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("https://graph.microsoft.com/v1.0/me/events", "/me/events"),
        ("https://graph.microsoft.com/beta/me", "/me"),
        ("/v1.0/me", "/me"),
        ("/beta/v1.0/me", "/me"),
        ("https://graph.microsoft.us/me", "/me"),
        ("graph.microsoft.com/v1.0/me/events", "/me/events"),
        ("graph.microsoft.us/beta/me", "/me"),
        ("microsoftgraph.chinacloudapi.cn/v1.0/me", "/me"),
        ("graph.microsoft.com/me", "/me"),
        ("me/events", "/me/events"),
        ("/beta-features/me", "/beta-features/me"),
    ],
)
def test_strip_edition_prefix(raw: str, expected: str) -> None:
    assert strip_edition_prefix(raw) == expected


@pytest.mark.parametrize(
    ("raw", "edition"),
    [
        ("https://graph.microsoft.com/v1.0/me", Edition.PRIMARY),
        ("/beta/me", Edition.PREVIEW),
        ("graph.microsoft.com/v1.0/me", Edition.PRIMARY),
        ("graph.microsoft.us/beta/me", Edition.PREVIEW),
        ("graphs/v1.0/me", Edition.UNKNOWN),
        ("/BETA/me", Edition.PREVIEW),
        ("/v1.0?$select=id", Edition.PRIMARY),
        ("/me", Edition.UNKNOWN),
        ("/me/v1.0", Edition.UNKNOWN),
    ],
)
def test_classify_edition(raw: str, edition: Edition) -> None:
    assert classify_edition(raw) == edition


def test_split_segments_keeps_parenthesised_slashes() -> None:
    assert split_segments("/sites/{id}/getByPath(path='/a/b')/items") == [
        "sites",
        "{id}",
        "getByPath(path='/a/b')",
        "items",
    ]
    assert split_segments("/") == []
    assert split_segments("//users//{id}/") == ["users", "{id}"]


def test_bare_graph_host_normalizes_like_a_full_url() -> None:
    bare = "graph.microsoft.com/v1.0/users/{user-id}/messages/{message-id}"
    assert normalize_path(bare) == normalize_path(f"https://{bare}") == "/users/{id}/messages/{id}"
