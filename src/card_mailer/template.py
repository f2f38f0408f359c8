"""Fixed Japanese thank-you email template."""

from card_mailer.models.email import EmailTemplateData, ExtractedInfo, GeneratedEmail

INITIAL_SENDER_NAME = "田中康太郎"
INITIAL_EVENT_NAME = "異業種交流会"
DEFAULT_SENDER_NAMES = ("田中康太郎", "アーウィン海")

SUBJECT_PREFIX = "【御礼】"
SUBJECT_SUFFIX = "（Irwin&Co 生成AI）"

# Full-width space, as used in Japanese business correspondence.
RECIPIENT_SEPARATOR = "　"
HONORIFIC = " 様"

BODY_TEMPLATE = """{recipient}

お世話になっております。Irwin&co株式会社の{sender_name}でございます。
昨日の{event_name}では、貴重なお時間をいただき誠にありがとうございました。

弊社では現在、生成AIを活用したコンサルティング、受託開発を主力事業として行っております。
不動産・建設領域向けの パース生成AIの構築・マイソクPDFデータの読み取り等に強みがある企業となっております。
会社紹介資料を添付しておりますので、お手すきの際にご確認いただけますと幸いです。
ご興味ございましたらご回答いただけますと幸いです。

何卒よろしくお願い申し上げます。"""


def recipient_line(info: ExtractedInfo) -> str:
    """Build ``{company}　{person} 様``, keeping the separator when company is empty."""
    return f"{info.company_name}{RECIPIENT_SEPARATOR}{info.person_name}{HONORIFIC}"


def render_email(data: EmailTemplateData) -> GeneratedEmail:
    """
    Render the thank-you email for a business card.

    Pure and deterministic; inputs are substituted as-is without validation.

    Args:
        data: Sender, event and the names extracted from the card.

    Returns:
        GeneratedEmail with the subject and body text.
    """
    subject = f"{SUBJECT_PREFIX}{data.event_name}{SUBJECT_SUFFIX}"
    body = BODY_TEMPLATE.format(
        recipient=recipient_line(data.extracted_info),
        sender_name=data.sender_name,
        event_name=data.event_name,
    )
    return GeneratedEmail(subject=subject, body=body)


def render(sender_name: str, event_name: str, extracted_info: ExtractedInfo) -> GeneratedEmail:
    """Shortcut for :func:`render_email` taking the fields directly."""
    return render_email(
        EmailTemplateData(
            sender_name=sender_name,
            event_name=event_name,
            extracted_info=extracted_info,
        )
    )
