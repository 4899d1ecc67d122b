"""
Natural-language templates, keyed by (type, language).

Synthesizer and query code only pick a template and pass values; all wording
lives here so texts can be reviewed and translated on their own.
"""
import logging
from typing import Dict, Optional, Tuple

from budget_oracle.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"

CURRENCY_SYMBOLS = {"TRY": "₺", "USD": "$", "EUR": "€"}

TEMPLATES: Dict[Tuple[str, str], Dict[str, str]] = {
    # ---------------- English ----------------
    ("summary", "en"): {
        "title": "Monthly Summary",
        "body": "Your total income is {income}, your total spending is {expenses}. Your balance is {balance}. ",
        "savings": "Your savings rate is {rate}%.",
        "no_savings": "You have not saved anything this period.",
    },
    ("trend", "en"): {
        "title": "Spending Trend",
        "up": "This month your spending is up {percent}% on last month ({current} vs {previous}).",
        "down": "This month your spending is down {percent}% on last month. Great job!",
        "stable": "Your spending is about the same as last month.",
    },
    ("dominance", "en"): {
        "title": "Top Spending Category",
        "body": "Your largest expense this month: {name} ({total}, {percent}%). ",
        "second": "{name} comes second ({total}).",
    },
    ("anomaly", "en"): {
        "title_large_transaction": "Large Expense: {category} ({amount})",
        "title_category_share": "Category Share: {category}",
        "large_transaction": "Unusually large {category} expense, {ratio}x your recent average",
        "category_share": "{category} takes {current}% of this month's spending, against a typical {typical}%",
        "content": "{description} ({amount})",
    },
    ("health", "en"): {
        "title": "Budget Health",
        "body": "Your budget health score: {score}/100 ({grade}).",
        "good": " Your finances look healthy!",
    },
    ("health_factor", "en"): {
        "savings_rate": "Savings Rate",
        "savings_rate_detail": "{rate}% savings rate",
        "spending_ratio": "Spending vs Income",
        "spending_ratio_detail": "You spent {percent}% of your income",
        "spending_ratio_no_income": "No income recorded",
        "goal_pace": "Goal Progress",
        "goal_pace_detail": "{count} active goal(s)",
        "goal_pace_behind": "{behind} of {count} goal(s) behind pace",
        "goal_pace_none": "No savings goals set yet",
        "diversification": "Spending Diversity",
        "diversification_detail": "Largest category: {name} ({percent}%)",
        "diversification_none": "No spending recorded this month",
        "volatility": "Spending Stability",
        "volatility_detail": "Monthly spending varies by {percent}%",
        "volatility_none": "Not enough monthly history to measure stability",
    },
    ("goal", "en"): {
        "title": "Goal: {name}",
        "progress": "\"{name}\" is {percent}% complete.",
        "days": " {days} days left.",
        "daily": " You need to save {amount} per day.",
        "deadline_passed": " The target date has passed.",
        "behind": " You may be falling behind on this goal.",
    },
    ("tip", "en"): {
        "onboarding_title": "Getting Started",
        "onboarding": "Start recording your income and expenses! The more data you add, the more accurate my analysis gets.",
        "track_title": "Track Your Spending",
        "track": "You have income on record but no expenses yet. Log your spending to unlock trends and a health score.",
        "savings_title": "Savings Tip",
        "savings": "Aim to save at least 20% of your income. The 50/30/20 rule is a good starting point.",
    },
    ("query", "en"): {
        "spending_empty": "You have no expenses recorded this month yet. Start logging your spending!",
        "spending_total": "This month you spent {total} in total.\n\nYour largest categories:\n",
        "spending_line": "- {name}: {total} ({percent}%)\n",
        "savings_no_income": "Record your income first so I can calculate your savings rate.",
        "savings_rate": "Your savings rate: {rate}%.\n\n",
        "savings_great": "Great! You are saving 20% or more. Keep it up.",
        "savings_gap": "Aim for at least 20%. You need to save {amount} more per month.",
        "savings_none": (
            "You have not saved anything this period. Start small:\n"
            "1. Cancel unused subscriptions\n"
            "2. Cut back on coffee and snacks\n"
            "3. Set up an automatic transfer to savings"
        ),
        "goals_none": "You have no active goals yet. Create a savings goal to track your progress.",
        "goals_header": "Active goals: {count}\n\n",
        "goal_line": "- {name}: {percent}%",
        "goal_days": " ({days} days left)",
        "health_empty": "I need some recorded expenses before I can score your budget health.",
        "health_header": "Your budget health score: {score}/100 ({grade})\n\nDetails:\n",
        "health_line": "- {name}: {score}/100 - {detail}\n",
        "general_empty": "Start recording your data! As you add income and expenses I can help you better.",
    },
    # ---------------- Turkish ----------------
    ("summary", "tr"): {
        "title": "Aylik Ozet",
        "body": "Toplam geliriniz {income}, toplam harcamaniz {expenses}. Bakiyeniz {balance}. ",
        "savings": "Tasarruf oraniniz %{rate}.",
        "no_savings": "Bu donemde tasarruf yapilmadi.",
    },
    ("trend", "tr"): {
        "title": "Harcama Trendi",
        "up": "Bu ay harcamalariniz gecen aya gore %{percent} artti ({current} vs {previous}).",
        "down": "Bu ay harcamalariniz gecen aya gore %{percent} azaldi. Harika!",
        "stable": "Harcamalariniz gecen aya gore sabit kaldi.",
    },
    ("dominance", "tr"): {
        "title": "En Buyuk Harcama",
        "body": "Bu ayin en buyuk harcama kalemi: {name} ({total}, %{percent}). ",
        "second": "Ikinci sirada {name} ({total}).",
    },
    ("anomaly", "tr"): {
        "title_large_transaction": "Buyuk Harcama: {category} ({amount})",
        "title_category_share": "Kategori Payi: {category}",
        "large_transaction": "{category} kategorisinde olagandisi buyuk harcama, son ortalamanin {ratio} kati",
        "category_share": "{category} bu ayki harcamalarin %{current} kadarini olusturuyor, normalde %{typical}",
        "content": "{description} ({amount})",
    },
    ("health", "tr"): {
        "title": "Butce Sagligi",
        "body": "Butce saglik puaniniz: {score}/100 ({grade}).",
        "good": " Finansal durumunuz iyi gorunuyor!",
    },
    ("health_factor", "tr"): {
        "savings_rate": "Tasarruf Orani",
        "savings_rate_detail": "%{rate} tasarruf orani",
        "spending_ratio": "Gelir-Gider Dengesi",
        "spending_ratio_detail": "Gelirinizin %{percent} kadarini harcadiniz",
        "spending_ratio_no_income": "Gelir kaydedilmemis",
        "goal_pace": "Hedef Ilerlemesi",
        "goal_pace_detail": "{count} aktif hedef",
        "goal_pace_behind": "{count} hedeften {behind} tanesi geride",
        "goal_pace_none": "Henuz hedef belirlenmemis",
        "diversification": "Harcama Cesitliligi",
        "diversification_detail": "En buyuk kategori: {name} (%{percent})",
        "diversification_none": "Bu ay harcama verisi yok",
        "volatility": "Harcama Istikrari",
        "volatility_detail": "Aylik harcamalar %{percent} oraninda dalgalaniyor",
        "volatility_none": "Istikrari olcmek icin yeterli aylik veri yok",
    },
    ("goal", "tr"): {
        "title": "Hedef: {name}",
        "progress": "\"{name}\" hedefi: %{percent} tamamlandi.",
        "days": " {days} gun kaldi.",
        "daily": " Gunluk {amount} biriktirmeniz gerekiyor.",
        "deadline_passed": " Hedef tarihi gecti.",
        "behind": " Hedefinizin gerisinde kaliyor olabilirsiniz.",
    },
    ("tip", "tr"): {
        "onboarding_title": "Ipucu",
        "onboarding": "Harcamalarinizi kaydetmeye baslayin! Ne kadar cok veri olursa, analizlerim o kadar dogru olur.",
        "track_title": "Harcamalarinizi Kaydedin",
        "track": "Geliriniz kayitli ama henuz harcama yok. Trend ve saglik puani icin harcamalarinizi ekleyin.",
        "savings_title": "Tasarruf Onerisi",
        "savings": "Gelirinizin en az %20'sini biriktirmeyi hedefleyin. 50/30/20 kurali iyi bir baslangic noktasidir.",
    },
    ("query", "tr"): {
        "spending_empty": "Bu ay henuz harcama kaydiniz bulunmuyor. Harcamalarinizi kaydetmeye baslayin!",
        "spending_total": "Bu ay toplam {total} harcadiniz.\n\nEn buyuk harcama kalemleri:\n",
        "spending_line": "- {name}: {total} (%{percent})\n",
        "savings_no_income": "Gelirinizi kaydederek baslayin. Boylece tasarruf oraninizi hesaplayabilirim.",
        "savings_rate": "Tasarruf oraniniz: %{rate}.\n\n",
        "savings_great": "Harika! %20 ve uzerinde tasarruf yapiyorsunuz. Bu orani korumaya devam edin.",
        "savings_gap": "Hedefiniz en az %20 olmali. Ayda {amount} daha biriktirmeniz gerekiyor.",
        "savings_none": (
            "Bu donemde tasarruf yapilmamis. Kucuk adimlarla baslayin:\n"
            "1. Gereksiz abonelikleri iptal edin\n"
            "2. Kahve/atistirmalik harcamalarini azaltin\n"
            "3. Otomatik tasarruf kurun"
        ),
        "goals_none": "Henuz aktif hedefiniz yok. Yeni bir tasarruf hedefi olusturabilirsiniz.",
        "goals_header": "Aktif hedef sayisi: {count}\n\n",
        "goal_line": "- {name}: %{percent}",
        "goal_days": " ({days} gun kaldi)",
        "health_empty": "Butce sagliginizi puanlamak icin once harcama kaydetmelisiniz.",
        "health_header": "Butce saglik puaniniz: {score}/100 ({grade})\n\nDetaylar:\n",
        "health_line": "- {name}: {score}/100 - {detail}\n",
        "general_empty": "Verilerinizi kaydetmeye baslayin! Gelir ve giderlerinizi ekledikce size daha iyi yardimci olabilirim.",
    },
}


def resolve_language(language: Optional[str]) -> str:
    return language or settings.LANGUAGE


def render(kind: str, name: str, language: Optional[str] = None, /, **values) -> str:
    """
    Fill the ``name`` template of ``kind`` in ``language``.
    Missing languages or entries fall back to English.
    """
    language = resolve_language(language)
    table = TEMPLATES.get((kind, language))
    if table is None or name not in table:
        if language != DEFAULT_LANGUAGE:
            logger.debug(f"No {language!r} template for {kind}.{name}, using {DEFAULT_LANGUAGE!r}")
        table = TEMPLATES[(kind, DEFAULT_LANGUAGE)]
    return table[name].format(**values)


def format_currency(amount: float, currency: Optional[str] = None) -> str:
    currency = currency or settings.CURRENCY
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"
