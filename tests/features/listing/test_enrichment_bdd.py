"""BDD tests for the enriched function listing."""

import pytest
from pytest_bdd import scenarios

scenarios("enrichment.feature")

pytestmark = [
    pytest.mark.tier(2),
    pytest.mark.tra("Adapter.ASGI.EnrichedListing"),
]
