"""Internationalisation helpers for Family Points."""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from .catalog import BONUS_ACTIVITIES, DAILY_RULES, SCHOOL_EVENTS
from .config import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES

_ENGLISH: Dict[str, str] = {
    "title": "Family Points",
    "dailyPointsAwarded": "Daily points awarded",
    "pointsAdded": "{points} points added",
    "pointsDeducted": "{points} points deducted",
    "actionUndone": "Action undone",
    "cannotUndo": "Cannot undo",
    "resetSuccess": "Points reset",
    "resetFailed": "Reset failed",
    "maxReached": "Maximum reached!",
    "rules.broken": "Broken",
    "error.loadMembers": "Failed to load family members",
    "error.loadMemberData": "Failed to load member data",
    "error.addTransaction": "Failed to save points",
    "error.updateProgress": "Failed to update daily progress",
    "error.connection": "Failed to connect to database. Please check your connection.",
}
_ENGLISH.update({f"rules.{rule.key}": rule.label for rule in DAILY_RULES})
_ENGLISH.update({f"bonus.{activity.key}": activity.label for activity in BONUS_ACTIVITIES})
_ENGLISH.update({f"school.{event.key}": event.label for event in SCHOOL_EVENTS})

_FRENCH: Dict[str, str] = {
    "title": "Points de la famille",
    "dailyPointsAwarded": "Points du jour attribués",
    "pointsAdded": "{points} points ajoutés",
    "pointsDeducted": "{points} points retirés",
    "actionUndone": "Action annulée",
    "cannotUndo": "Impossible d'annuler",
    "resetSuccess": "Points réinitialisés",
    "resetFailed": "Échec de la réinitialisation",
    "maxReached": "Maximum atteint !",
    "rules.broken": "Enfreinte",
    "error.loadMembers": "Impossible de charger les membres",
    "error.loadMemberData": "Impossible de charger les données",
    "error.addTransaction": "Impossible d'enregistrer les points",
    "error.updateProgress": "Impossible de mettre à jour la journée",
    "error.connection": "Connexion à la base de données impossible.",
    "rules.organization": "Ranger après une activité",
    "rules.bed": "Faire son lit",
    "rules.plate": "Débarrasser son assiette après les repas",
    "rules.teeth": "Se brosser les dents après le petit-déjeuner et le dîner",
    "rules.shower": "Se doucher un jour sur deux et ranger son peignoir",
    "rules.ipad": "Charger l'iPad et ranger ses classeurs",
    "rules.pajamas": "Mettre son pyjama",
    "rules.laundry": "Mettre le linge sale au panier ou les déchets à la poubelle",
    "rules.family_manners": "Bonnes manières en famille",
    "rules.bedtime": "Aller au lit à l'heure",
    "rules.table_manners": "Bonnes manières à table",
    "rules.parent": "Ne pas jouer au parent",
    "rules.interrupt": "Ne pas interrompre les autres",
    "rules.repeat": "Ne pas faire répéter maman",
    "bonus.setTable": "Mettre la table",
    "bonus.hangWashing": "Étendre le linge",
    "bonus.takeOutEmy": "Sortir Emy",
    "bonus.generalHelp": "Aide générale",
    "bonus.takeOutGarbage": "Sortir les poubelles",
    "bonus.cleanRabbit": "Nettoyer l'enclos du lapin",
    "bonus.orderDrawers": "Ranger tiroirs et armoires",
    "bonus.generalCleaning": "Nettoyage général",
    "school.monthlyAvg": "Moyenne mensuelle atteinte",
    "school.allSubjects": "Toutes les branches au-dessus de l'objectif",
    "school.belowMin": "En dessous du minimum dans une branche",
}

_ITALIAN: Dict[str, str] = {
    "title": "Punti di famiglia",
    "dailyPointsAwarded": "Punti giornalieri assegnati",
    "pointsAdded": "{points} punti aggiunti",
    "pointsDeducted": "{points} punti tolti",
    "actionUndone": "Azione annullata",
    "cannotUndo": "Impossibile annullare",
    "resetSuccess": "Punti azzerati",
    "resetFailed": "Azzeramento non riuscito",
    "maxReached": "Massimo raggiunto!",
    "rules.broken": "Infranta",
    "error.loadMembers": "Impossibile caricare i membri",
    "error.loadMemberData": "Impossibile caricare i dati",
    "error.addTransaction": "Impossibile salvare i punti",
    "error.updateProgress": "Impossibile aggiornare la giornata",
    "error.connection": "Impossibile connettersi al database.",
    "rules.organization": "Riordinare dopo un'attività",
    "rules.bed": "Rifare il letto",
    "rules.plate": "Portare via il piatto dopo i pasti",
    "rules.teeth": "Lavarsi i denti dopo colazione e cena",
    "rules.shower": "Fare la doccia un giorno sì e uno no e riordinare l'accappatoio",
    "rules.ipad": "Caricare l'iPad e riordinare le cartelle",
    "rules.pajamas": "Mettere il pigiama",
    "rules.laundry": "Mettere i panni sporchi nel cesto o i rifiuti nel cestino",
    "rules.family_manners": "Buone maniere in famiglia",
    "rules.bedtime": "Andare a letto in orario",
    "rules.table_manners": "Buone maniere a tavola",
    "rules.parent": "Non fare il genitore",
    "rules.interrupt": "Non interrompere gli altri",
    "rules.repeat": "Non far ripetere le cose alla mamma",
    "bonus.setTable": "Apparecchiare la tavola",
    "bonus.hangWashing": "Stendere il bucato",
    "bonus.takeOutEmy": "Portare fuori Emy",
    "bonus.generalHelp": "Aiuto generale",
    "bonus.takeOutGarbage": "Portare fuori la spazzatura",
    "bonus.cleanRabbit": "Pulire lo spazio del coniglio",
    "bonus.orderDrawers": "Riordinare cassetti e armadi",
    "bonus.generalCleaning": "Pulizie generali",
    "school.monthlyAvg": "Media mensile raggiunta",
    "school.allSubjects": "Tutte le materie sopra l'obiettivo",
    "school.belowMin": "Sotto il minimo in una materia",
}


class Translator:
    """Store translations for short interface strings."""

    def __init__(
        self,
        default_locale: str = DEFAULT_LANGUAGE,
        *,
        translations: Optional[Mapping[str, Mapping[str, str]]] = None,
    ) -> None:
        self.default_locale = default_locale
        self._translations: Dict[str, Dict[str, str]] = {
            "en": dict(_ENGLISH),
            "fr": dict(_FRENCH),
            "it": dict(_ITALIAN),
        }
        if translations:
            for locale, mapping in translations.items():
                self._translations.setdefault(locale, {}).update(mapping)

    def translate(self, key: str, *, locale: Optional[str] = None, **params: object) -> str:
        target_locale = locale or self.default_locale
        language = self._translations.get(target_locale) or self._translations[DEFAULT_LANGUAGE]
        text = language.get(key) or self._translations[DEFAULT_LANGUAGE].get(key, key)
        for name, value in params.items():
            text = text.replace(f"{{{name}}}", str(value))
        return text

    def rule_label(self, rule_key: str, *, locale: Optional[str] = None) -> str:
        return self.translate(f"rules.{rule_key}", locale=locale)


def next_language(current: str) -> str:
    """Cycle through the supported languages (en → fr → it → en)."""

    try:
        index = SUPPORTED_LANGUAGES.index(current)
    except ValueError:
        return DEFAULT_LANGUAGE
    return SUPPORTED_LANGUAGES[(index + 1) % len(SUPPORTED_LANGUAGES)]


__all__ = ["Translator", "next_language"]
