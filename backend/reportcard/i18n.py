"""
i18n.py — Message catalogs and the translator used by the report card.

A translator is any callable ``t(key, params=None) -> str``. Callers may
pass their own; make_translator() builds one from the bundled catalogs.
Unknown keys echo the key so a missing message never breaks a document.
"""

from typing import Any, Callable, Dict, Mapping, Optional

Translator = Callable[..., str]


EN_MESSAGES: Dict[str, str] = {
    # Footer / header
    "Export.page": "Page",
    "Export.generated": "Generated",
    "Export.notAvailableShort": "N/A",
    "Export.unknownSchoolName": "School Name",
    "Export.telLabel": "Tel",
    "Export.emailLabel": "Email",
    "Export.reportCardTitle": "Report Card",
    "Export.unknownPeriod": "Unknown Period",
    "Export.unknownAcademicYear": "N/A",
    # Student card
    "Export.studentLabel": "Student",
    "Export.matriculeLabel": "Matricule",
    "Export.classLabel": "Class",
    "Export.dobLabel": "Date of Birth",
    "Export.pobLabel": "Place of Birth",
    "Export.sexLabel": "Sex",
    "Export.unknownStudent": "Unknown Student",
    "Export.unknownClass": "Unknown Class",
    # Overall summary
    "Export.overallSummary": "Overall Summary",
    "Export.averageScore": "Average",
    "Export.classRank": "Class Rank",
    "Export.totalPoints": "Total Points",
    "Export.classAverage": "Class Average",
    "Export.totalCoefficient": "Total Coef.",
    "Export.decision": "Decision",
    "Export.passed": "Passed",
    "Export.failed": "Failed",
    "Export.unknown": "Unknown",
    "Export.promotionStatusLabel": "Promotion Status",
    "Export.promotionRemarksLabel": "Promotion Remarks",
    "Export.promotionStatus.promoted": "Promoted",
    "Export.promotionStatus.conditional_promotion": "Conditionally Promoted",
    "Export.promotionStatus.repeated": "Repeats the Class",
    "Export.promotionRemark.promoted": (
        "Promoted to the next class with an average of {average}/20 "
        "and {passed} of {total} subjects passed."
    ),
    "Export.promotionRemark.conditional_promotion": (
        "Promoted on condition with an average of {average}/20: {passed} of {total} "
        "subjects passed. Remedial work is expected in the remaining subjects."
    ),
    "Export.promotionRemark.repeated": (
        "Repeats the class with an average of {average}/20: only {passed} of {total} "
        "subjects passed."
    ),
    # Subject breakdown
    "Export.subjectBreakdown": "Subject Breakdown",
    "Export.noSubjectData": "No subject data available for this period.",
    "Export.subject": "Subject",
    "Export.coefShort": "Coef.",
    "Export.finalScore": "Score",
    "Export.rankShort": "Rank",
    "Export.classAvgShort": "Class Avg.",
    "Export.appreciation": "Remarks",
    "Export.teacher": "Teacher",
    "Export.absentShort": "ABS",
    "Export.subjectsPassed": "{passed} of {total} subjects passed",
    "Export.grades.excellent": "Excellent",
    "Export.grades.very_good": "Very Good",
    "Export.grades.good": "Good",
    "Export.grades.satisfactory": "Satisfactory",
    "Export.grades.passing": "Passing",
    "Export.grades.needs_improvement": "Needs Improvement",
    "Export.grades.weak": "Weak",
    "Export.grades.very_weak": "Very Weak",
    # Remarks & signatures
    "Export.remarksLabel": "Remarks",
    "Export.deanOfStudiesSignature": "Dean of Studies",
    "Export.principalSignature": "Principal",
}


FR_MESSAGES: Dict[str, str] = {
    "Export.page": "Page",
    "Export.generated": "Généré le",
    "Export.notAvailableShort": "N/D",
    "Export.unknownSchoolName": "Nom de l'établissement",
    "Export.telLabel": "Tél",
    "Export.emailLabel": "Email",
    "Export.reportCardTitle": "Bulletin de notes",
    "Export.unknownPeriod": "Période inconnue",
    "Export.unknownAcademicYear": "N/D",
    "Export.studentLabel": "Élève",
    "Export.matriculeLabel": "Matricule",
    "Export.classLabel": "Classe",
    "Export.dobLabel": "Né(e) le",
    "Export.pobLabel": "À",
    "Export.sexLabel": "Sexe",
    "Export.unknownStudent": "Élève inconnu",
    "Export.unknownClass": "Classe inconnue",
    "Export.overallSummary": "Résumé général",
    "Export.averageScore": "Moyenne",
    "Export.classRank": "Rang",
    "Export.totalPoints": "Total des points",
    "Export.classAverage": "Moyenne de la classe",
    "Export.totalCoefficient": "Total coef.",
    "Export.decision": "Décision",
    "Export.passed": "Admis",
    "Export.failed": "Échec",
    "Export.unknown": "Inconnu",
    "Export.promotionStatusLabel": "Statut de passage",
    "Export.promotionRemarksLabel": "Observations de passage",
    "Export.promotionStatus.promoted": "Admis en classe supérieure",
    "Export.promotionStatus.conditional_promotion": "Admis sous condition",
    "Export.promotionStatus.repeated": "Redouble",
    "Export.promotionRemark.promoted": (
        "Admis en classe supérieure avec une moyenne de {average}/20 "
        "et {passed} matières validées sur {total}."
    ),
    "Export.promotionRemark.conditional_promotion": (
        "Admis sous condition avec une moyenne de {average}/20 : {passed} matières "
        "validées sur {total}. Un travail de rattrapage est attendu dans les autres matières."
    ),
    "Export.promotionRemark.repeated": (
        "Redouble avec une moyenne de {average}/20 : seulement {passed} matières "
        "validées sur {total}."
    ),
    "Export.subjectBreakdown": "Détail par matière",
    "Export.noSubjectData": "Aucune note disponible pour cette période.",
    "Export.subject": "Matière",
    "Export.coefShort": "Coef.",
    "Export.finalScore": "Note",
    "Export.rankShort": "Rang",
    "Export.classAvgShort": "Moy. classe",
    "Export.appreciation": "Appréciation",
    "Export.teacher": "Enseignant",
    "Export.absentShort": "ABS",
    "Export.subjectsPassed": "{passed} matières validées sur {total}",
    "Export.grades.excellent": "Excellent",
    "Export.grades.very_good": "Très bien",
    "Export.grades.good": "Bien",
    "Export.grades.satisfactory": "Assez bien",
    "Export.grades.passing": "Passable",
    "Export.grades.needs_improvement": "Insuffisant",
    "Export.grades.weak": "Faible",
    "Export.grades.very_weak": "Très faible",
    "Export.remarksLabel": "Observations",
    "Export.deanOfStudiesSignature": "Le Préfet des études",
    "Export.principalSignature": "Le Principal",
}


CATALOGS: Dict[str, Dict[str, str]] = {
    "en": EN_MESSAGES,
    "fr": FR_MESSAGES,
}


def available_locales():
    return sorted(CATALOGS)


def make_translator(locale: str = "en", overrides: Optional[Mapping[str, str]] = None) -> Translator:
    """Build ``t(key, params=None)`` over a bundled catalog (English fallback)."""
    catalog = dict(EN_MESSAGES)
    catalog.update(CATALOGS.get(str(locale or "en").lower()[:2], {}))
    if overrides:
        catalog.update(overrides)

    def t(key: str, params: Optional[Mapping[str, Any]] = None) -> str:
        template = catalog.get(key, key)
        if not params:
            return template
        try:
            return template.format(**params)
        except (KeyError, IndexError, ValueError):
            return template

    return t
