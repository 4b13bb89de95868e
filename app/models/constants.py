"""Domain constants: currencies, persisted field keys and UI labels.

Currencies stay plain strings (validated against CURRENCIES) so they can be
stored in the metadata table and posted from HTML forms without conversion.
"""

from typing import Dict, Tuple

SGD = "SGD"
USD = "USD"
IDR = "IDR"

# Display order used by the form and the currency selector
CURRENCIES: Tuple[str, ...] = (SGD, USD, IDR)

FIELD_PREFIX = "calculator-imei:"

# field name -> default value (stored as text in the metadata table)
FIELD_DEFAULTS: Dict[str, float | str] = {
    "priceSGD": 1000.0,
    "priceUSD": 750.0,
    "priceIDR": 11250000.0,
    "bufferSGD": 66.67,
    "bufferUSD": 50.0,
    "bufferIDR": 750000.0,
    "usdToSgdRate": 1.33,
    "usdToIdrRate": 15000.0,
    "taxRelieve": 500.0,
    "activeInput": SGD,
    "activeBufferInput": USD,
    "selectedCurrency": USD,
}

LOCALES: Dict[str, str] = {
    "calculatorTitle": "IMEI Tax Calculator",
    "priceInSgdLabel": "Price (SGD)",
    "priceInUsdLabel": "Price (USD)",
    "priceInIdrLabel": "Price (IDR)",
    "usdToSgdRateLabel": "USD to SGD Rate",
    "usdToIdrRateLabel": "USD to IDR Rate",
    "bufferSgdLabel": "Buffer (SGD)",
    "bufferUsdLabel": "Buffer (USD)",
    "bufferIdrLabel": "Buffer (IDR)",
    "taxRelieveLabel": "Tax Relieve",
    "priceAfterTaxRelieveLabel": "Price after Tax Relieve",
    "pphAmountLabel": "PPh Amount",
    "importPriceLabel": "Import Price",
    "customImportTaxLabel": "Custom Import Tax",
    "ppnAmountLabel": "PPN Amount",
    "pph22AmountLabel": "PPh22 Amount",
    "totalTaxAmountLabel": "Total Tax Amount",
    "totalPriceWithBufferLabel": "Total Price with Buffer",
    "equivalentToIdr": "Equivalent to IDR",
    "atRate": "at USD/IDR rate:",
    "currencySelection": "Display Tax Calculation in:",
    "refreshRate": "Refresh Rate",
    "resetLabel": "Reset to defaults",
    "SGD": "SGD",
    "USD": "USD",
    "IDR": "IDR",
    "exchangeRate.sync.successMessage": "Exchange Rate is updated to today's rate.",
    "exchangeRate.sync.failedMessage": "Failed to update exchange rate. Please try again!",
}


def t(key: str) -> str:
    """Look up a UI label, falling back to the key itself."""
    return LOCALES.get(key, key)
