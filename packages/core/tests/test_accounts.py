"""Tests for chart of accounts suggestions and validation."""

import pytest

from soa_core.accounts import (
    MAX_SUGGESTIONS,
    Account,
    ChartOfAccounts,
    suggest_accounts,
    validate_account_codes,
)
from soa_core.documents import empty_document
from soa_core.editing import add_asset, update_asset
from soa_core.models import Asset, ChargeType, WarningCode


@pytest.fixture
def chart() -> ChartOfAccounts:
    return ChartOfAccounts(accounts=(
        Account(account_code="FCR01", account_name="Freehold Property",
                account_group="Fixed Charge Realisations"),
        Account(account_code="FCR02", account_name="Plant and Machinery",
                account_group="Fixed Charge Realisations"),
        Account(account_code="AR01", account_name="Stock", account_group="Asset Realisations"),
        Account(account_code="AR02", account_name="Book Debts", account_group="Asset Realisations"),
        Account(account_code="AR03", account_name="Cash at Bank", account_group="Asset Realisations"),
        Account(account_code="AR99", account_name="Fixed charge sundry",
                account_group="Asset Realisations"),
        Account(account_code="CP01", account_name="Bank Charges", account_group="Cost of Realisations"),
    ))


class TestSuggestAccounts:
    """Tests for account suggestions."""

    def test_fixed_charge_accounts(self, chart):
        codes = [a.account_code for a in suggest_accounts(chart, "", ChargeType.FIXED_CHARGE)]
        assert codes == ["FCR01", "FCR02"]

    def test_asset_realisation_accounts_exclude_fixed_charge(self, chart):
        codes = [a.account_code for a in suggest_accounts(chart, None, ChargeType.FLOATING_CHARGE)]
        assert codes == ["AR01", "AR02", "AR03"]

    def test_filters_by_description(self, chart):
        codes = [a.account_code for a in suggest_accounts(chart, "book", ChargeType.UNCHARGED)]
        assert codes == ["AR02"]

    def test_filters_by_code(self, chart):
        codes = [a.account_code for a in suggest_accounts(chart, "ar03", ChargeType.UNCHARGED)]
        assert codes == ["AR03"]

    def test_no_match_offers_all_relevant(self, chart):
        codes = [a.account_code for a in suggest_accounts(chart, "motor", ChargeType.UNCHARGED)]
        assert codes == ["AR01", "AR02", "AR03"]

    def test_limited(self):
        chart = ChartOfAccounts(accounts=tuple(
            Account(account_code=f"AR{i:02d}", account_name=f"Item {i}", account_group="Asset Realisations")
            for i in range(40)
        ))
        assert len(suggest_accounts(chart, "", ChargeType.UNCHARGED)) == MAX_SUGGESTIONS


class TestValidateAccountCodes:
    """Tests for clearing codes not in the chart."""

    def test_unknown_code_cleared_with_warning(self, chart):
        document = empty_document("case-1")
        document = add_asset(document, ChargeType.UNCHARGED, asset=Asset(id="x1", account_code="ZZ99"))
        document = add_asset(document, ChargeType.UNCHARGED, asset=Asset(id="x2", account_code="AR03"))

        cleaned, warnings = validate_account_codes(document, chart)

        uncharged = {a.id: a for a in cleaned.schedule_a.global_assets.uncharged}
        assert uncharged["x1"].account_code is None
        assert uncharged["x2"].account_code == "AR03"
        assert [w.code for w in warnings] == [WarningCode.UNKNOWN_ACCOUNT_CODE]
        assert warnings[0].actual_value == "ZZ99"

    def test_fixed_section_codes_checked(self, chart):
        document = empty_document("case-1")
        asset_id = document.sections[0].assets[0].id
        document = update_asset(document, asset_id, account_code="NOPE")

        cleaned, warnings = validate_account_codes(document, chart)
        assert cleaned.sections[0].assets[0].account_code is None
        assert len(warnings) == 1

    def test_valid_document_unchanged(self, chart):
        document = empty_document("case-1")
        cleaned, warnings = validate_account_codes(document, chart)
        assert cleaned is document
        assert warnings == []

    def test_chart_lookup(self, chart):
        assert chart.get("AR01").account_name == "Stock"
        assert chart.get("missing") is None
        assert chart.get(None) is None
