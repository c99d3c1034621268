"""
Price Diversification Pass.

Alcune risposte provider riportano lo stesso identico totale su tutte le offerte:
in quel caso i prezzi vengono distribuiti su una progressione lineare fino a +18%
sull'ultima offerta, così l'interfaccia mostra tariffe distinguibili.

È un aggiustamento di presentazione, non un calcolo tariffario: la formula va
mantenuta identica (arrotondamento half-up incluso) per compatibilità con i client.
"""
import math

from app.services.providers.base import Offer

MAX_SPREAD_FRACTION = 0.18


def _round_half_up(value: float) -> int:
    # Stesso comportamento di Math.round: 0.5 arrotonda verso +inf
    return math.floor(value + 0.5)


def diversify_prices(offers: list[Offer]) -> list[Offer]:
    """
    Se ci sono più offerte e tutti i totali coincidono, ridistribuisce i prezzi:

        total_i = round(T * (1 + step * i))     step = 0.18 / (n - 1)
        tax_i   = round(total_i * tax_rate)     tax_rate = tax_0 / T (0 se T == 0)
        base_i  = total_i - tax_i

    Modifica solo i campi price (in place), mantiene ordine e id.
    Se i totali sono già diversi la lista è restituita invariata.
    """
    if len(offers) <= 1:
        return offers
    if len({o.price.total for o in offers}) != 1:
        return offers

    base_total = offers[0].price.total or 0
    base_tax = offers[0].price.tax or 0
    tax_rate = base_tax / base_total if base_total > 0 else 0
    step = MAX_SPREAD_FRACTION / (len(offers) - 1)

    for i, offer in enumerate(offers):
        new_total = _round_half_up(base_total * (1 + step * i))
        new_tax = _round_half_up(new_total * tax_rate)
        offer.price.total = float(new_total)
        offer.price.tax = float(new_tax)
        offer.price.base = float(new_total - new_tax)

    return offers
