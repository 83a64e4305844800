"""
Derivation de l'avis / Verdict derivation.

L'avis ne fait que s'aggraver automatiquement : une NC bloquante impose
"non conforme", une NC avec reserve impose au moins "sous reserve".
"Conforme" n'est jamais pose automatiquement.
The verdict only escalates automatically; "compliant" is never auto-set.
"""

import logging
from collections.abc import Iterable

from vgp_inspect.services.checklist import ChecklistItem, ItemStatus
from vgp_inspect.services.record import InspectionRecord, Verdict

log = logging.getLogger(__name__)

# Gravite croissante / Increasing severity
_SEVERITY = {
    Verdict.UNSET: 0,
    Verdict.COMPLIANT: 0,
    Verdict.COMPLIANT_WITH_RESERVATIONS: 1,
    Verdict.NON_COMPLIANT: 2,
}

AUTO_VERDICT_NOTICES = {
    Verdict.NON_COMPLIANT: "Verdict auto: NON CONFORME (mise à l'arrêt)",
    Verdict.COMPLIANT_WITH_RESERVATIONS: "Verdict auto: Conforme sous réserve",
}


def derive_verdict(items: Iterable[ChecklistItem], current: Verdict = Verdict.UNSET) -> Verdict:
    """Avis derive des statuts / Verdict derived from item statuses.

    Independant de l'ordre des items ; ne retrograde jamais `current`.
    """
    statuses = {it.status for it in items}
    if ItemStatus.NON_CONFORMING_BLOCKING in statuses:
        floor = Verdict.NON_COMPLIANT
    elif ItemStatus.NON_CONFORMING_RESERVATION in statuses:
        floor = Verdict.COMPLIANT_WITH_RESERVATIONS
    else:
        return current

    if _SEVERITY[current] >= _SEVERITY[floor]:
        return current
    return floor


def apply_derived_verdict(record: InspectionRecord) -> str | None:
    """Appliquer l'avis derive ; retourne la notification a afficher /
    Apply the derived verdict; returns the notice to show the user, if any.
    """
    derived = derive_verdict(record.checklist.items(), record.verdict)
    if derived is record.verdict:
        return None
    log.info("Auto verdict %s -> %s (inspection %s)", record.verdict.value, derived.value, record.id)
    record.verdict = derived
    return AUTO_VERDICT_NOTICES[derived]


def apply_new_escalation(
    record: InspectionRecord,
    previous_items: Iterable[ChecklistItem] = (),
) -> str | None:
    """Appliquer l'avis derive seulement si les statuts se sont aggraves
    depuis `previous_items` / Apply the derived verdict only when statuses got
    worse since `previous_items`.

    Un avis abaisse par l'inspecteur est conserve tant que les statuts ne
    changent pas.
    """
    before = derive_verdict(previous_items)
    after = derive_verdict(record.checklist.items())
    if _SEVERITY[after] <= _SEVERITY[before]:
        return None
    return apply_derived_verdict(record)
