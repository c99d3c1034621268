"""
Utility durate — i provider esprimono le durate in formati diversi.

  Amadeus → stringa ISO 8601 ridotta ("PT2H15M", "PT45M", "PT3H")
  Sabre   → intero in minuti (ElapsedTime)

Entrambe le funzioni non sollevano mai eccezioni: una durata illeggibile
diventa 0 minuti (valore degradato, non errore).
"""
import re

_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?")


def parse_duration_minutes(value: str | None) -> int:
    """Converte durata ISO 'PT2H30M' in minuti totali (0 se assente o non valida)."""
    if not value or not isinstance(value, str):
        return 0
    match = _DURATION_RE.match(value)
    if not match:
        return 0
    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    return hours * 60 + minutes


def as_minutes(value) -> int:
    """Accetta minuti numerici (anche come stringa) oppure una durata ISO."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(0, int(value))
    if isinstance(value, str):
        if value.strip().isdigit():
            return int(value.strip())
        return parse_duration_minutes(value)
    return 0
