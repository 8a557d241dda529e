"""
Hebrew cognate lookup and display gating.

The static table maps Arabic words (without diacritics) to Hebrew cognates
sharing a Semitic root. An entry in the table is a validated connection;
nothing here is inferred by AI.

Display rules:
1. Only Arabic content shows a Hebrew cognate.
2. Only single words show one: the content type must be 'word' and, when the
   selected text is known, it must tokenize to exactly one word token.
3. A cognate with a non-empty root must exist.
"""
import re
from typing import Dict, Optional

from lingodeck.models.enums import ContentType, PracticeLanguage
from lingodeck.schemas.practice import HebrewCognate, PracticeItem
from lingodeck.utils.text_utils import count_words

_DIACRITICS = re.compile("[\u064B-\u065F\u0670\u0640]")  # harakat, superscript alef, tatweel
_WEAK_LETTERS = re.compile("[اوي]")
_DEFINITE_ARTICLE = "ال"

COGNATE_MAP: Dict[str, HebrewCognate] = {
    # Writing
    "كتب": HebrewCognate(root="כתב", meaning="write", notes="Root k-t-b"),
    "كتاب": HebrewCognate(root="כתב", meaning="write", notes="kitab = book"),
    "مكتب": HebrewCognate(root="כתב", meaning="write", notes="maktab/michtav - office/letter"),
    "مكتبة": HebrewCognate(root="כתב", meaning="write", notes="maktaba = library"),
    # Peace
    "سلام": HebrewCognate(root="שלום", meaning="peace", notes="salaam/shalom"),
    "سلم": HebrewCognate(root="שלם", meaning="peace/complete"),
    # House, numbers, nature
    "بيت": HebrewCognate(root="בית", meaning="house", notes="bayt/bayit"),
    "واحد": HebrewCognate(root="אחד", meaning="one", notes="wahid/echad"),
    "ماء": HebrewCognate(root="מים", meaning="water", notes="maa/mayim"),
    "يوم": HebrewCognate(root="יום", meaning="day", notes="yawm/yom"),
    "ليل": HebrewCognate(root="לילה", meaning="night", notes="layl/layla"),
    "ليلة": HebrewCognate(root="לילה", meaning="night"),
    "أرض": HebrewCognate(root="ארץ", meaning="earth/land", notes="ard/eretz"),
    "سماء": HebrewCognate(root="שמים", meaning="sky/heaven", notes="samaa/shamayim"),
    "شمس": HebrewCognate(root="שמש", meaning="sun", notes="shams/shemesh"),
    # People and body
    "قلب": HebrewCognate(root="לב", meaning="heart", notes="qalb/lev"),
    "ملك": HebrewCognate(root="מלך", meaning="king", notes="malik/melech"),
    "اسم": HebrewCognate(root="שם", meaning="name", notes="ism/shem"),
    "أم": HebrewCognate(root="אם", meaning="mother", notes="umm/em"),
    "أب": HebrewCognate(root="אב", meaning="father", notes="ab/av"),
    "أخ": HebrewCognate(root="אח", meaning="brother", notes="akh/ach"),
    "ابن": HebrewCognate(root="בן", meaning="son", notes="ibn/ben"),
    "بنت": HebrewCognate(root="בת", meaning="daughter", notes="bint/bat"),
    "ولد": HebrewCognate(root="ילד", meaning="child", notes="walad/yeled"),
    "رأس": HebrewCognate(root="ראש", meaning="head", notes="ras/rosh"),
    "يد": HebrewCognate(root="יד", meaning="hand", notes="yad/yad"),
    "عين": HebrewCognate(root="עין", meaning="eye", notes="ayn/ayin"),
    "دم": HebrewCognate(root="דם", meaning="blood", notes="dam/dam"),
    "لسان": HebrewCognate(root="לשון", meaning="tongue", notes="lisan/lashon"),
    # Actions
    "عمل": HebrewCognate(root="עמל", meaning="work/toil", notes="amal/amal"),
    "سمع": HebrewCognate(root="שמע", meaning="hear", notes="samia/shama"),
    "أكل": HebrewCognate(root="אכל", meaning="eat", notes="akala/achal"),
    "قرأ": HebrewCognate(root="קרא", meaning="read/call", notes="qaraa/kara"),
    "فتح": HebrewCognate(root="פתח", meaning="open", notes="fataha/patach"),
    "ذكر": HebrewCognate(root="זכר", meaning="remember", notes="dhakara/zachar"),
    "موت": HebrewCognate(root="מות", meaning="death", notes="mawt/mavet"),
    # Time and place
    "زمن": HebrewCognate(root="זמן", meaning="time", notes="zaman/zman"),
    "سنة": HebrewCognate(root="שנה", meaning="year", notes="sana/shana"),
    "ساعة": HebrewCognate(root="שעה", meaning="hour", notes="saa/shaah"),
    "مكان": HebrewCognate(root="מקום", meaning="place", notes="makan/makom"),
    "سوق": HebrewCognate(root="שוק", meaning="market", notes="suq/shuk"),
    # Food and animals
    "ذهب": HebrewCognate(root="זהב", meaning="gold", notes="dhahab/zahav"),
    "ملح": HebrewCognate(root="מלח", meaning="salt", notes="milh/melach"),
    "زيت": HebrewCognate(root="זית", meaning="oil"),
    "تمر": HebrewCognate(root="תמר", meaning="date", notes="tamr/tamar"),
    "كلب": HebrewCognate(root="כלב", meaning="dog", notes="kalb/kelev"),
    "جمل": HebrewCognate(root="גמל", meaning="camel", notes="jamal/gamal"),
    # Abstract
    "روح": HebrewCognate(root="רוח", meaning="spirit/wind", notes="ruh/ruach"),
    "نفس": HebrewCognate(root="נפש", meaning="soul/self", notes="nafs/nefesh"),
    "جديد": HebrewCognate(root="חדש", meaning="new", notes="jadid/chadash"),
}


def strip_diacritics(word: str) -> str:
    """Remove Arabic short-vowel marks and tatweel."""
    return _DIACRITICS.sub("", word).strip()


def _find_single_word(word: str) -> Optional[HebrewCognate]:
    stripped = strip_diacritics(word)
    if not stripped:
        return None

    variations = [
        stripped,
        re.sub("[أإآ]", "ا", stripped),
        re.sub("ة$", "ه", stripped),
        re.sub("ى$", "ي", stripped),
    ]
    if stripped.startswith(_DEFINITE_ARTICLE) and len(stripped) > len(_DEFINITE_ARTICLE) + 1:
        variations.append(stripped[len(_DEFINITE_ARTICLE):])

    for variant in variations:
        if variant in COGNATE_MAP:
            return COGNATE_MAP[variant]

    # Very rough root extraction: drop weak letters, keep the first three consonants
    consonants = _WEAK_LETTERS.sub("", stripped)
    if len(consonants) >= 3:
        return COGNATE_MAP.get(consonants[:3])
    return None


def find_hebrew_cognate_for_phrase(phrase: str) -> Optional[HebrewCognate]:
    """
    Cognate for the first word of a phrase that has one.

    The returned notes name the word the cognate belongs to.
    """
    if not phrase or not phrase.strip():
        return None

    for word in phrase.split():
        cognate = _find_single_word(word)
        if cognate:
            notes = f"{cognate.notes} (for {word})" if cognate.notes else f"for {word}"
            return cognate.model_copy(update={"notes": notes})
    return None


def find_hebrew_cognate(word: Optional[str]) -> Optional[HebrewCognate]:
    """
    Look up the Hebrew cognate for an Arabic word or phrase.

    Args:
        word: Arabic word (diacritics allowed) or phrase

    Returns:
        The cognate, or None when the table has no match
    """
    if not word or not word.strip():
        return None
    if len(word.split()) > 1:
        return find_hebrew_cognate_for_phrase(word)
    return _find_single_word(word)


def should_show_hebrew_cognate(
    language: str,
    content_type: str,
    hebrew_candidate: Optional[HebrewCognate],
    selected_text: Optional[str] = None,
) -> bool:
    """
    Decide whether a Hebrew cognate should be displayed.

    Args:
        language: Language of the content
        content_type: Content type of the content
        hebrew_candidate: Candidate cognate, if any
        selected_text: Optional selected text, checked to be a single word token

    Returns:
        True if the cognate should be shown
    """
    if language != PracticeLanguage.ARABIC.value:
        return False

    if content_type != ContentType.WORD.value:
        return False

    # Guards against multi-word text misclassified as a word
    if selected_text is not None and count_words(selected_text, language) != 1:
        return False

    if hebrew_candidate is None or not hebrew_candidate.root:
        return False

    return True


def cognate_for_item(item: PracticeItem) -> Optional[HebrewCognate]:
    """
    The cognate to display for a practice item, if any.

    The item's own cognate wins over the static table.
    """
    candidate = item.hebrew_cognate or find_hebrew_cognate(item.target_text)
    if should_show_hebrew_cognate(
        item.language.value,
        item.content_type.value,
        candidate,
        selected_text=item.target_text,
    ):
        return candidate
    return None
