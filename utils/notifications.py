"""
Notifications Module - Email and Telegram notifications to the site admin
"""

import smtplib
import requests
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from flask import current_app


def get_admin_notifications_config():
    """Load admin notification settings from the app config"""
    return {
        'telegram': {
            'bot_token': current_app.config.get('ADMIN_TELEGRAM_BOT_TOKEN') or '',
            'chat_id': current_app.config.get('ADMIN_TELEGRAM_CHAT_ID') or ''
        },
        'smtp': {
            'host': current_app.config.get('ADMIN_SMTP_HOST') or '',
            'port': current_app.config.get('ADMIN_SMTP_PORT') or '587',
            'email': current_app.config.get('ADMIN_SMTP_EMAIL') or '',
            'password': current_app.config.get('ADMIN_SMTP_PASSWORD') or ''
        }
    }


def send_email(recipient, subject, body, html=False):
    """
    Send email using the admin SMTP account

    Args:
        recipient (str): Email recipient
        subject (str): Email subject
        body (str): Email body
        html (bool): Whether body is HTML

    Returns:
        bool: Success status
    """
    smtp_config = get_admin_notifications_config()['smtp']
    if not all([
        smtp_config.get('host'),
        smtp_config.get('port'),
        smtp_config.get('email'),
        smtp_config.get('password')
    ]):
        current_app.logger.debug("SMTP config incomplete, email not sent")
        return False

    try:
        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = smtp_config.get('email')
        msg['To'] = recipient
        msg.attach(MIMEText(body, 'html' if html else 'plain'))

        with smtplib.SMTP(smtp_config.get('host'), int(smtp_config.get('port'))) as server:
            server.starttls()
            server.login(smtp_config.get('email'), smtp_config.get('password'))
            server.send_message(msg)

        current_app.logger.info(f"Email sent to {recipient}")
        return True
    except Exception as e:
        current_app.logger.error(f"Error sending email to {recipient}: {str(e)}")
        return False


def send_telegram_notification(message_text):
    """
    Send a Telegram notification to the admin chat

    Returns:
        bool: True if sent successfully, False otherwise
    """
    telegram = get_admin_notifications_config()['telegram']
    bot_token, chat_id = telegram['bot_token'], telegram['chat_id']

    if not (bot_token and chat_id):
        current_app.logger.debug("No Telegram credentials configured")
        return False

    try:
        url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
        payload = {
            'chat_id': chat_id,
            'text': message_text,
            'parse_mode': 'HTML'
        }
        response = requests.post(url, json=payload, timeout=10)
        if response.status_code == 200:
            current_app.logger.info("Telegram notification sent")
            return True
        current_app.logger.error(f"Telegram API error: {response.status_code}")
        return False
    except Exception as e:
        current_app.logger.error(f"Telegram notification error: {str(e)}")
        return False


def notify_new_message(message):
    """Tell the admin about a new contact form message"""
    from markupsafe import escape

    body = message.get('message', '')
    preview = body[:200] + ('...' if len(body) > 200 else '')
    return send_telegram_notification(
        f"📧 <b>New Portfolio Message</b>\n\n"
        f"👤 <b>From:</b> {escape(message.get('name', ''))}\n"
        f"📧 <b>Email:</b> {escape(message.get('email', ''))}\n"
        f"💬 <b>Message:</b>\n{escape(preview)}")
