"""Unit tests for the Cadence interaction parser."""

import pytest

from flowdex.services.interactions import (
    INTERACTION_SCRIPT,
    INTERACTION_TRANSACTION,
    CadenceScriptParser,
    InteractionParameter,
    parse_parameters,
)
from flowdex.utils.exceptions import ScriptParseError


@pytest.fixture
def parser():
    """Script parser instance."""
    return CadenceScriptParser()


class TestParseParameters:
    """Tests for parameter list parsing."""

    def test_labels_and_nested_types(self):
        parameters = parse_parameters(
            "_ amounts: {String: [UFix64]}, recipient to: Address"
        )

        assert parameters == [
            InteractionParameter("amounts", "{String: [UFix64]}"),
            InteractionParameter("to", "Address"),
        ]

    def test_missing_type_raises(self):
        with pytest.raises(ScriptParseError):
            parse_parameters("amount")


class TestCadenceScriptParser:
    """Tests for interaction detection."""

    @pytest.mark.asyncio
    async def test_transaction_parameters(self, parser):
        source = """
            import FungibleToken from 0xee82856bf20e2aa6

            // transaction(ignored: Int)
            transaction(amount: UFix64, to: Address) {
                prepare(signer: auth(BorrowValue) &Account) {}
            }
        """

        parsed = await parser.parse(source)

        assert parsed.is_ok
        assert parsed.kind == INTERACTION_TRANSACTION
        assert [p.identifier for p in parsed.parameters] == ["amount", "to"]

    @pytest.mark.asyncio
    async def test_transaction_without_parameters(self, parser):
        parsed = await parser.parse("transaction {\n execute { log(1) }\n}")

        assert parsed.is_ok
        assert parsed.kind == INTERACTION_TRANSACTION
        assert parsed.parameters == []

    @pytest.mark.asyncio
    async def test_script_parameters(self, parser):
        parsed = await parser.parse(
            "access(all) fun main(address: Address): UFix64 { return 0.0 }"
        )

        assert parsed.kind == INTERACTION_SCRIPT
        assert parsed.parameters == [InteractionParameter("address", "Address")]

    @pytest.mark.asyncio
    async def test_no_declaration_is_an_error(self, parser):
        parsed = await parser.parse("access(all) contract Foo {}")

        assert not parsed.is_ok
        assert parsed.error == "No transaction or script declaration found"

    def test_unbalanced_parentheses_is_an_error(self, parser):
        parsed = parser.parse_source("transaction(amount: UFix64 {")

        assert parsed.kind == INTERACTION_TRANSACTION
        assert not parsed.is_ok
        assert "Unbalanced" in parsed.error

    def test_double_slash_inside_string_is_not_a_comment(self, parser):
        parsed = parser.parse_source(
            'let url = "https://example.org"; transaction(amount: UFix64) {}'
        )

        assert parsed.is_ok
        assert [p.identifier for p in parsed.parameters] == ["amount"]

    def test_declaration_inside_string_is_ignored(self, parser):
        parsed = parser.parse_source(
            'let hint = "transaction(fake: Int)"\nfun main(real: Int): Int { return 1 }'
        )

        assert parsed.kind == INTERACTION_SCRIPT
        assert parsed.parameters == [InteractionParameter("real", "Int")]
