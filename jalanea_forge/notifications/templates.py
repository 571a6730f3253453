"""Transactional email templates.

Personal, founder-style emails. Each builder returns the subject and the HTML
body; user-supplied values are escaped before they reach the markup.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from html import escape


class EmailType(str, Enum):
    welcome = "welcome"
    subscription_confirmed = "subscriptionConfirmed"
    subscription_cancelled = "subscriptionCancelled"
    usage_alert = "usageAlert"


@dataclass(frozen=True)
class EmailContent:
    subject: str
    html: str


BASE_STYLE = """
  body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    line-height: 1.8;
    color: #374151;
    max-width: 600px;
    margin: 0 auto;
    padding: 40px 20px;
  }
  a { color: #6366f1; }
  .link-button {
    display: inline-block;
    background: #6366f1;
    color: white !important;
    padding: 12px 24px;
    border-radius: 6px;
    text-decoration: none;
    font-weight: 500;
    margin: 8px 4px 8px 0;
  }
  .signature {
    margin-top: 32px;
    padding-top: 24px;
    border-top: 1px solid #e5e7eb;
    color: #6b7280;
  }
"""


def _page(body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head><style>{BASE_STYLE}</style></head>
<body>
{body}
</body>
</html>
"""


def _signature(closing: str) -> str:
    return f'<div class="signature"><p>{closing},<br><strong>Alexus</strong><br>Founder, Jalanea Forge</p></div>'


def welcome(name: str, app_url: str) -> EmailContent:
    name = escape(name)
    return EmailContent(
        subject="Welcome to Jalanea Forge",
        html=_page(
            f"""<p>Hey {name},</p>
<p>I'm Alexus — the creator of Jalanea Forge.</p>
<p>I built Jalanea Forge because I believe everyone has great ideas, but turning those ideas into something real — a product, a business, a solution — can feel overwhelming. That's where we come in.</p>
<p>Jalanea Forge uses AI to help you go from a spark of an idea to a concrete plan you can actually execute. No more staring at blank pages or wondering "where do I even start?"</p>
<p><strong>Here's how to get started:</strong></p>
<p>
  <a href="{app_url}" class="link-button">Describe your idea</a>
  <a href="{app_url}" class="link-button">Generate your PRD</a>
  <a href="{app_url}" class="link-button">Get your roadmap</a>
</p>
<p>You've got <strong>25 free AI generations</strong> to explore. That's enough to fully develop a few ideas and see what's possible.</p>
<p><strong>P.S.:</strong> What idea are you working on? What brought you here?</p>
<p>Hit "Reply" and let me know. I read every email.</p>
{_signature("Cheers")}"""
        ),
    )


def subscription_confirmed(name: str, plan: str, generations: int, app_url: str) -> EmailContent:
    is_pro = plan == "Pro"
    name, plan_html = escape(name), escape(plan)
    priority = "<li>Priority support (yes, I actually respond)</li>" if is_pro else ""
    return EmailContent(
        subject=f"You're in — welcome to {plan}",
        html=_page(
            f"""<p>Hey {name},</p>
<p>Thank you. Seriously.</p>
<p>By upgrading to {plan_html}, you're not just getting more AI generations — you're investing in your ideas. And that means a lot to me.</p>
<p><strong>Here's what you now have access to:</strong></p>
<ul>
  <li><strong>{generations} AI generations</strong> per month</li>
  <li>{"Unlimited" if is_pro else "10"} projects</li>
  <li>Export your PRDs</li>
  <li>Full version history</li>
  {priority}
</ul>
<p>Now the real question: <strong>What are you going to build?</strong></p>
<p><a href="{app_url}" class="link-button">Start a new project</a></p>
<p>If you ever need help or have feedback, just reply to this email. I'm here.</p>
{_signature("Let's build something great")}"""
        ),
    )


def subscription_cancelled(name: str, app_url: str) -> EmailContent:
    name = escape(name)
    return EmailContent(
        subject="You're always welcome back",
        html=_page(
            f"""<p>Hey {name},</p>
<p>I saw that you cancelled your subscription. No hard feelings — I get it.</p>
<p>You'll still have access to your current plan until the end of your billing period. After that, you'll be on the Free plan with 25 generations per month and 3 projects.</p>
<p>Your projects aren't going anywhere. They'll be here if you ever want to pick up where you left off.</p>
<p><strong>One quick ask:</strong> Would you mind telling me why you cancelled? Was it the price? Missing features? Something else?</p>
<p>Your feedback genuinely helps me make Jalanea Forge better. Just hit reply.</p>
<p>And if you ever want to come back, it's just one click:</p>
<p><a href="{app_url}" class="link-button">Resubscribe</a></p>
{_signature("Thanks for giving us a shot")}"""
        ),
    )


def usage_alert(name: str, used: int, limit: int, percentage: int, app_url: str) -> EmailContent:
    name = escape(name)
    exhausted = percentage >= 100
    if exhausted:
        subject = "You've hit your limit — but your ideas don't have to stop"
        lead = (
            f"<p>You've used all <strong>{limit} AI generations</strong> this month. "
            "That's actually awesome — it means you're putting in the work.</p>\n"
            "<p>But I don't want your momentum to stop. If you're in the middle of something, "
            "upgrading takes 30 seconds:</p>"
        )
    else:
        subject = f"Quick heads up: {percentage}% of your generations used"
        lead = (
            f"<p>Just a quick heads up — you've used <strong>{used} of your {limit}</strong> "
            f"AI generations this month ({percentage}%).</p>\n"
            "<p>If you're working on something big and might need more, now's a good time to think about upgrading:</p>"
        )
    wait_note = " Or you can wait it out — no pressure." if exhausted else ""
    return EmailContent(
        subject=subject,
        html=_page(
            f"""<p>Hey {name},</p>
{lead}
<p><a href="{app_url}" class="link-button">Upgrade now</a></p>
<p>Your generations reset at the start of each billing cycle.{wait_note}</p>
{_signature("Keep building")}"""
        ),
    )
