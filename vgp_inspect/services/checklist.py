"""
Checklist d'inspection VGP / VGP inspection checklist.

Catalogue fixe des points de controle par section et magasin d'etat en memoire.
Fixed catalogue of check points per section and in-memory state store.
"""

import enum
from dataclasses import dataclass, field

from vgp_inspect.services.equipment_registry import SectionId


class ItemStatus(str, enum.Enum):
    """Statut d'un point de controle / Check item status."""
    UNSET = "UNSET"
    COMPLIANT = "COMPLIANT"
    NON_CONFORMING_RESERVATION = "NON_CONFORMING_RESERVATION"
    NON_CONFORMING_BLOCKING = "NON_CONFORMING_BLOCKING"
    NOT_APPLICABLE = "NOT_APPLICABLE"

    @property
    def is_non_conforming(self) -> bool:
        return self in (ItemStatus.NON_CONFORMING_RESERVATION, ItemStatus.NON_CONFORMING_BLOCKING)

    @property
    def is_answered(self) -> bool:
        return self is not ItemStatus.UNSET

    @classmethod
    def parse(cls, value: "ItemStatus | str | None") -> "ItemStatus":
        """Accepte aussi les codes courts historiques / Also accepts legacy short codes."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.UNSET
        legacy = LEGACY_STATUS_CODES.get(value)
        if legacy is not None:
            return legacy
        return cls(value)


# Codes de l'ancien format (c / nc / nca / na) / Legacy format codes
LEGACY_STATUS_CODES: dict[str, ItemStatus] = {
    "c": ItemStatus.COMPLIANT,
    "nc": ItemStatus.NON_CONFORMING_RESERVATION,
    "nca": ItemStatus.NON_CONFORMING_BLOCKING,
    "na": ItemStatus.NOT_APPLICABLE,
}


@dataclass(frozen=True)
class PhotoRef:
    """Photo compressee (data URL) / Compressed photo (data URL)."""
    id: str
    data: str
    timestamp: str  # ISO 8601


# Prefixe des identifiants par section / Item id prefix per section
ITEM_ID_PREFIX: dict[SectionId, str] = {
    SectionId.DOCS: "docs",
    SectionId.VISUEL: "visuel",
    SectionId.SECURITE: "securite",
    SectionId.ESSAIS: "essais",
    SectionId.CHASSIS: "chassis",
    SectionId.STABILISATEURS: "stab",
    SectionId.ENERGIE: "energie",
    SectionId.POSTE: "poste",
    SectionId.GARDE_CORPS: "gc",
}

# Libelles par position, ordre d'affichage / Labels per position, display order
CHECKLIST_CATALOG: dict[SectionId, tuple[str, ...]] = {
    SectionId.DOCS: (
        "Plaque signalétique lisible et complète",
        "CMU / Abaque de charges présent et lisible",
        "Consignes de sécurité affichées",
        "Certificat de conformité CE disponible",
        "Notice d'utilisation présente",
        "Carnet de maintenance à jour",
    ),
    SectionId.VISUEL: (
        "Fixation châssis - serrage et état des boulons",
        "Revêtement sol antidérapant",
        "État général structure (déformation, corrosion, fissures)",
        "Axes et arrêts d'axes",
        "Traverse et articulations",
        "Flexibles hydrauliques (fuite, usure)",
        "Vérins hydrauliques (fuite, état)",
        "Verrouillage position route",
        "Verrouillage boîtier poste bas",
        "Commande bi-manuelle conforme",
        "Identification des commandes",
        "Sélecteur de commande",
        "Arrêt d'urgence",
        "Retour au neutre automatique",
    ),
    SectionId.SECURITE: (
        "Limiteur de charge (déclenchement ≤ 110% CMU)",
        "Limiteur de débit (vitesse descente ≤ 0,15 m/s)",
        "Freinage vertical (descente ≤ 10 cm)",
        "Stop palette / butée de charge",
        "Drapeaux de signalisation",
        "Bandes réfléchissantes",
        "Feux à éclats / gyrophare",
    ),
    SectionId.ESSAIS: (
        "Essai des mouvements (montée, descente, inclinaison)",
        "Épreuve dynamique",
        "Épreuve statique 1h",
        "Maintien de charge 10 min (descente ≤ 10 cm)",
    ),
    SectionId.CHASSIS: (
        "Roues et bandages (état, fixation)",
        "Freins de parc / immobilisation",
        "Timon et dispositif de déplacement",
    ),
    SectionId.STABILISATEURS: (
        "Stabilisateurs (état, déploiement)",
        "Sécurité de calage (contact sol)",
        "Interdiction de levée sans calage",
    ),
    SectionId.ENERGIE: (
        "Batterie / alimentation (état, fixation)",
        "Câbles et connexions électriques",
        "Groupe hydraulique (niveau, fuites)",
    ),
    SectionId.POSTE: (
        "Protège-tête",
        "Commandes du poste de conduite",
    ),
    SectionId.GARDE_CORPS: (
        "Garde-corps (présence, hauteur)",
        "Fixation et verrouillage des garde-corps",
        "Portillon d'accès (fermeture automatique)",
    ),
}


def item_id(section: SectionId, position: int) -> str:
    return f"{ITEM_ID_PREFIX[section]}-{position}"


def catalog_item_ids() -> list[str]:
    """Tous les identifiants dans l'ordre du catalogue / All ids in catalogue order."""
    return [
        item_id(section, i)
        for section, labels in CHECKLIST_CATALOG.items()
        for i in range(len(labels))
    ]


class UnknownChecklistItem(KeyError):
    """Identifiant de point de controle inconnu / Unknown check item id."""


@dataclass
class ChecklistItem:
    """Point de controle / Check item."""
    id: str
    section: SectionId
    label: str
    status: ItemStatus = ItemStatus.UNSET
    note: str = ""
    attachments: list[PhotoRef] = field(default_factory=list)

    @property
    def needs_observation(self) -> bool:
        """NC sans observation / Non-conformity without an observation note."""
        return self.status.is_non_conforming and not self.note.strip()


@dataclass(frozen=True)
class SectionProgress:
    section: SectionId
    completed: int
    total: int

    @property
    def complete(self) -> bool:
        return self.completed == self.total


class ChecklistStore:
    """Etat de tous les points de controle / State of every check item.

    Accepte tout statut sans condition : la coherence (observation
    obligatoire, questions requises) est verifiee par la validation.
    """

    def __init__(self, items: list[ChecklistItem]):
        self._items: dict[str, ChecklistItem] = {}
        for item in items:
            if item.id in self._items:
                raise ValueError(f"Duplicate checklist item id: {item.id}")
            self._items[item.id] = item

    @classmethod
    def new(cls) -> "ChecklistStore":
        """Une checklist vierge, un item par position / A blank checklist."""
        return cls([
            ChecklistItem(id=item_id(section, i), section=section, label=label)
            for section, labels in CHECKLIST_CATALOG.items()
            for i, label in enumerate(labels)
        ])

    def get(self, id: str) -> ChecklistItem:
        try:
            return self._items[id]
        except KeyError:
            raise UnknownChecklistItem(id) from None

    def __contains__(self, id: str) -> bool:
        return id in self._items

    def items(self) -> list[ChecklistItem]:
        return list(self._items.values())

    def all_in_section(self, section: SectionId | str) -> list[ChecklistItem]:
        section = SectionId(section)
        return [it for it in self._items.values() if it.section is section]

    def set_status(self, id: str, status: ItemStatus | str) -> ChecklistItem:
        item = self.get(id)
        item.status = ItemStatus.parse(status)
        return item

    def set_note(self, id: str, text: str | None) -> ChecklistItem:
        item = self.get(id)
        item.note = text or ""
        return item

    def add_attachment(self, id: str, photo: PhotoRef) -> ChecklistItem:
        item = self.get(id)
        item.attachments.append(photo)
        return item

    def remove_attachment(self, photo_id: str) -> bool:
        for item in self._items.values():
            for photo in item.attachments:
                if photo.id == photo_id:
                    item.attachments.remove(photo)
                    return True
        return False

    def section_progress(self, section: SectionId | str) -> SectionProgress:
        """Conforme ou N/A comptent comme termines / Compliant or N/A count as done."""
        items = self.all_in_section(section)
        completed = sum(
            1 for it in items
            if it.status in (ItemStatus.COMPLIANT, ItemStatus.NOT_APPLICABLE)
        )
        return SectionProgress(section=SectionId(section), completed=completed, total=len(items))
