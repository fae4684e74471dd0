"""BDD tests for stock ledger decrements."""

from pytest_bdd import parsers, scenarios, then, when
from storefront.stock.ledger import stock_ledger

scenarios("features/stock_ledger.feature")


@when(
    parsers.cfparse('{quantity:d} units of size "{size}" are decremented'),
    target_fixture="result",
)
def decrement(product_id, quantity, size):
    return stock_ledger.decrement(product_id, size, quantity)


@then(parsers.cfparse('the decrement outcome is "{outcome}"'))
def decrement_outcome_is(result, outcome):
    assert result.outcome.value == outcome
