"""
Breach Notification Templates.

Renders the regulator-facing (GDPR Article 33, HIPAA 45 CFR 164.400-414),
patient-facing and internal-alert e-mails for a breach incident.

All functions are pure: every input is passed in by the caller and the
datastore is never touched. `incident` may be an ORM row or an
IncidentResponse; only attribute access is used. Bodies are Jinja2
templates rendered with autoescaping, so every interpolated value is
HTML-escaped.
"""
import re
from datetime import datetime
from typing import Any, Optional

from jinja2 import sandbox

from backend.app.core.exceptions import InvalidArgumentError
from backend.app.schemas.incidents import IncidentSeverity
from backend.app.schemas.notifications import DPOContactInfo, RenderedEmail

SEVERITY_COLORS = {
    IncidentSeverity.CRITICAL.value: "#dc3545",  # red
    IncidentSeverity.HIGH.value: "#fd7e14",      # orange
    IncidentSeverity.MEDIUM.value: "#ffc107",    # yellow
    IncidentSeverity.LOW.value: "#28a745",       # green
}
DEFAULT_SEVERITY_COLOR = "#6c757d"  # gray

# Internal alerts use the security dashboard palette
_ALERT_SEVERITY_COLORS = {
    IncidentSeverity.CRITICAL.value: "#dc2626",
    IncidentSeverity.HIGH.value: "#ea580c",
    IncidentSeverity.MEDIUM.value: "#ca8a04",
    IncidentSeverity.LOW.value: "#14b8a6",
}
_ALERT_DEFAULT_COLOR = "#6b7280"

INDIVIDUAL_PATIENT_SUBJECT = "Important: Data Security Incident Notification"

ORGANISATION_NAME = "Urology Patient Management System"

# Debug fragments appended by the behavioural anomaly detector
_DEBUG_PATTERNS = [
    re.compile(r"Event Hour:\s*\d{1,2}:\d{2}\s*\|\s*", re.IGNORECASE),
    re.compile(r"Average Hour:\s*\d{1,2}:\d{2}\s*\|\s*", re.IGNORECASE),
    re.compile(r"Expected Hours:\s*[\d:,\s]+\s*\|\s*", re.IGNORECASE),
    re.compile(r"\|\s*$"),
]

_env = sandbox.SandboxedEnvironment(autoescape=True)


def get_severity_color(severity: Optional[str]) -> str:
    """Badge colour for a severity; gray for anything unrecognised."""
    return SEVERITY_COLORS.get((severity or "").lower(), DEFAULT_SEVERITY_COLOR)


def clean_incident_description(description: Optional[str]) -> str:
    """Strip detector debug output from a description before it leaves the building."""
    if not description:
        return "No description provided."

    cleaned = description
    for pattern in _DEBUG_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    cleaned = cleaned.strip()

    if not cleaned:
        return ("A data security incident has been detected. "
                "Investigation and remediation measures are in progress.")
    return cleaned


def format_incident_type(incident_type: Optional[str]) -> str:
    """unauthorized_access -> Unauthorized Access"""
    if not incident_type:
        return "Not specified"
    return " ".join(word.capitalize() for word in incident_type.split("_"))


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


def format_date_long_gb(value: Any) -> str:
    """18 October 2026 at 14:05"""
    dt = _as_datetime(value)
    if dt is None:
        return "Not specified"
    return f"{dt.day} {dt:%B %Y} at {dt:%H:%M}"


def format_date_long_us(value: Any) -> str:
    """October 18, 2026 at 02:05 PM"""
    dt = _as_datetime(value)
    if dt is None:
        return "Not specified"
    return f"{dt:%B} {dt.day}, {dt:%Y} at {dt:%I:%M %p}"


def _joined_data_types(incident: Any, default: str) -> str:
    data_types = getattr(incident, "affected_data_types", None) or []
    return ", ".join(str(t) for t in data_types) or default


def _affected_count(incident: Any) -> int:
    return len(getattr(incident, "affected_users", None) or [])


def _severity_label(incident: Any) -> str:
    severity = getattr(incident, "severity", None)
    return severity.upper() if severity else "UNKNOWN"


def _require(incident: Any, recipient: Any, recipient_label: str = "recipient") -> None:
    if incident is None or recipient is None:
        raise InvalidArgumentError(f"incident and {recipient_label} are required")


_GDPR_TEMPLATE = _env.from_string("""
    <!DOCTYPE html>
    <html lang="en">
    <head>
      <meta charset="UTF-8">
      <meta name="viewport" content="width=device-width, initial-scale=1.0">
      <title>GDPR Data Breach Notification</title>
    </head>
    <body style="font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; line-height: 1.6; color: #333; background-color: #f5f5f5; margin: 0; padding: 0;">
      <table role="presentation" style="width: 100%; border-collapse: collapse; background-color: #f5f5f5; padding: 20px;">
        <tr>
          <td align="center">
            <table role="presentation" style="max-width: 800px; width: 100%; background-color: #ffffff; border-radius: 8px; overflow: hidden;">
              <tr>
                <td style="background-color: #dc3545; padding: 30px 40px; text-align: center;">
                  <h1 style="margin: 0; color: #ffffff; font-size: 24px; font-weight: 600;">GDPR Data Breach Notification</h1>
                  <p style="margin: 10px 0 0 0; color: #ffffff; font-size: 14px;">Article 33 Compliance - 72-Hour Notification Requirement</p>
                </td>
              </tr>
              <tr>
                <td style="padding: 20px 40px; background-color: #fff3cd; border-bottom: 1px solid #ffc107;">
                  <p style="margin: 0; font-size: 13px; color: #856404; line-height: 1.5;">
                    <strong>Compliance Notice:</strong> This notification is sent in compliance with Article 33 of the General Data Protection Regulation (GDPR), which requires data controllers to notify the supervisory authority of a personal data breach within 72 hours of becoming aware of it.
                  </p>
                </td>
              </tr>
              <tr>
                <td style="padding: 30px 40px;">
                  <h2 style="color: #2c3e50; margin: 0 0 20px 0; font-size: 20px; border-bottom: 2px solid #dc3545; padding-bottom: 10px;">Incident Details</h2>
                  <table role="presentation" style="width: 100%; border-collapse: collapse;">
                    <tr>
                      <td style="padding: 10px 0; font-weight: 600; width: 220px; color: #495057;">Incident ID:</td>
                      <td style="padding: 10px 0; color: #212529;">#{{ incident_id }}</td>
                    </tr>
                    <tr>
                      <td style="padding: 10px 0; font-weight: 600; color: #495057;">Incident Type:</td>
                      <td style="padding: 10px 0; color: #212529;">{{ incident_type }}</td>
                    </tr>
                    <tr>
                      <td style="padding: 10px 0; font-weight: 600; color: #495057;">Severity Level:</td>
                      <td style="padding: 10px 0;">
                        <span style="display: inline-block; background-color: {{ severity_color }}; color: white; padding: 6px 12px; border-radius: 4px; font-size: 12px; font-weight: 600;">{{ severity_label }}</span>
                      </td>
                    </tr>
                    <tr>
                      <td style="padding: 10px 0; font-weight: 600; color: #495057;">Date &amp; Time Detected:</td>
                      <td style="padding: 10px 0; color: #212529;">{{ detected }}</td>
                    </tr>
                    <tr>
                      <td style="padding: 10px 0; font-weight: 600; color: #495057;">Affected Data Types:</td>
                      <td style="padding: 10px 0; color: #212529;">{{ data_types }}</td>
                    </tr>
                    <tr>
                      <td style="padding: 10px 0; font-weight: 600; color: #495057;">Number of Affected Individuals:</td>
                      <td style="padding: 10px 0; color: #212529;">{{ affected_count }} individual(s)</td>
                    </tr>
                  </table>
                </td>
              </tr>
              <tr>
                <td style="padding: 0 40px 30px 40px;">
                  <div style="background-color: #f8f9fa; padding: 20px; border-radius: 8px; border-left: 4px solid #6c757d;">
                    <h3 style="color: #495057; margin: 0 0 15px 0; font-size: 18px;">Incident Description</h3>
                    <p style="margin: 0; color: #212529; white-space: pre-wrap;">{{ description }}</p>
                  </div>
                </td>
              </tr>
              <tr>
                <td style="padding: 0 40px 30px 40px;">
                  <div style="background-color: #e7f3ff; padding: 25px; border-radius: 8px; border-left: 4px solid #0066cc;">
                    <h3 style="color: #004085; margin: 0 0 15px 0; font-size: 18px;">Remediation Actions &amp; Next Steps</h3>
                    <ol style="margin: 0; padding-left: 20px; color: #004085;">
                      <li><strong>Immediate Containment:</strong> The incident has been contained to prevent further unauthorized access or data exposure.</li>
                      <li><strong>Investigation:</strong> A comprehensive investigation is currently underway to determine the full scope and impact of the breach.</li>
                      <li><strong>Remediation Measures:</strong> Appropriate technical and organizational measures are being implemented to address the vulnerabilities identified.</li>
                      <li><strong>Individual Notification:</strong> Affected data subjects will be notified without undue delay, in accordance with Article 34 of the GDPR, where the breach is likely to result in a high risk to their rights and freedoms.</li>
                      <li><strong>Ongoing Monitoring:</strong> Enhanced monitoring and security measures have been implemented to prevent similar incidents in the future.</li>
                    </ol>
                  </div>
                </td>
              </tr>
              <tr>
                <td style="padding: 0 40px 30px 40px;">
                  <div style="background-color: #d1ecf1; padding: 25px; border-radius: 8px; border-left: 4px solid #0c5460;">
                    <h3 style="color: #0c5460; margin: 0 0 15px 0; font-size: 18px;">Contact Information</h3>
                    {%- if dpo %}
                      <p style="margin: 0 0 12px 0; color: #0c5460; font-size: 15px;">
                        <strong>Data Protection Officer:</strong><br>
                        {{ dpo.name }}
                      </p>
                      <p style="margin: 0 0 12px 0; color: #0c5460; font-size: 15px;">
                        <strong>Email:</strong> <a href="mailto:{{ dpo.email or '' }}" style="color: #0066cc; text-decoration: none;">{{ dpo.email or '' }}</a>
                      </p>
                      {%- if dpo.contact_number %}
                      <p style="margin: 0; color: #0c5460; font-size: 15px;">
                        <strong>Phone:</strong> {{ dpo.contact_number }}
                      </p>
                      {%- endif %}
                    {%- else %}
                      <p style="margin: 0; color: #0c5460; font-size: 15px; line-height: 1.6;">
                        For questions regarding this incident, please contact our Data Protection Officer using the contact details provided in our privacy policy or through our official communication channels.
                      </p>
                    {%- endif %}
                  </div>
                </td>
              </tr>
              <tr>
                <td style="padding: 30px 40px; background-color: #f8f9fa; border-top: 1px solid #dee2e6; text-align: center;">
                  <p style="margin: 0; font-size: 12px; color: #6c757d;">
                    This is an automated notification sent in compliance with GDPR Article 33.<br>
                    <strong>Please do not reply to this email.</strong> For inquiries, please use the contact information provided above.
                  </p>
                  <p style="margin: 15px 0 0 0; font-size: 11px; color: #adb5bd;">{{ organisation }} | Data Protection &amp; Compliance</p>
                </td>
              </tr>
            </table>
          </td>
        </tr>
      </table>
    </body>
    </html>
    """)

_HIPAA_TEMPLATE = _env.from_string("""
    <!DOCTYPE html>
    <html>
    <head>
      <meta charset="UTF-8">
      <meta name="viewport" content="width=device-width, initial-scale=1.0">
      <title>HIPAA Breach Notification</title>
    </head>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 800px; margin: 0 auto; padding: 20px;">
      <div style="background-color: #f8f9fa; padding: 30px; border-radius: 10px; border-left: 4px solid #0066cc;">
        <h1 style="color: #0066cc; margin-top: 0;">HIPAA Breach Notification</h1>
        <p style="font-size: 14px; color: #666; margin-bottom: 30px;">
          This notification is sent in compliance with HIPAA Breach Notification Rule (45 CFR §§ 164.400-414).
        </p>

        <div style="background-color: #ffffff; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
          <h2 style="color: #2c3e50; margin-top: 0; font-size: 18px;">Breach Incident Details</h2>
          <table style="width: 100%; border-collapse: collapse;">
            <tr>
              <td style="padding: 8px 0; font-weight: bold; width: 200px;">Incident ID:</td>
              <td style="padding: 8px 0;">#{{ incident_id }}</td>
            </tr>
            <tr>
              <td style="padding: 8px 0; font-weight: bold;">Breach Type:</td>
              <td style="padding: 8px 0;">{{ incident_type }}</td>
            </tr>
            <tr>
              <td style="padding: 8px 0; font-weight: bold;">Severity:</td>
              <td style="padding: 8px 0;">
                <span style="background-color: {{ severity_color }}; color: white; padding: 4px 8px; border-radius: 4px; font-size: 12px;">{{ severity_label }}</span>
              </td>
            </tr>
            <tr>
              <td style="padding: 8px 0; font-weight: bold;">Date of Breach:</td>
              <td style="padding: 8px 0;">{{ detected }}</td>
            </tr>
            <tr>
              <td style="padding: 8px 0; font-weight: bold;">Protected Health Information (PHI) Affected:</td>
              <td style="padding: 8px 0;">{{ data_types }}</td>
            </tr>
            <tr>
              <td style="padding: 8px 0; font-weight: bold;">Number of Individuals Affected:</td>
              <td style="padding: 8px 0;">{{ affected_count }} individual(s)</td>
            </tr>
          </table>
        </div>

        <div style="background-color: #ffffff; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
          <h2 style="color: #2c3e50; margin-top: 0; font-size: 18px;">Breach Description</h2>
          <p style="margin: 0; white-space: pre-wrap;">{{ description }}</p>
        </div>

        <div style="background-color: #fff3cd; padding: 15px; border-radius: 8px; border-left: 4px solid #ffc107; margin-bottom: 20px;">
          <h3 style="color: #856404; margin-top: 0; font-size: 16px;">Remediation Actions</h3>
          <ul style="margin: 0; padding-left: 20px; color: #856404;">
            <li>Immediate containment measures have been implemented</li>
            <li>Investigation is ongoing to determine the full scope</li>
            <li>Affected individuals are being notified as required</li>
            <li>Security measures are being enhanced to prevent future breaches</li>
          </ul>
        </div>

        <div style="background-color: #e7f3ff; padding: 15px; border-radius: 8px; border-left: 4px solid #0066cc; margin-top: 20px;">
          <p style="margin: 0; font-size: 12px; color: #004085;">
            <strong>Contact Information:</strong><br>
            For questions regarding this breach, please contact our Privacy Officer at the contact details provided in our Notice of Privacy Practices.
          </p>
        </div>

        <hr style="border: none; border-top: 1px solid #eee; margin: 30px 0;">
        <p style="font-size: 12px; color: #999; text-align: center; margin: 0;">
          This is an automated notification sent in compliance with HIPAA Breach Notification Rule.<br>
          Please do not reply to this email.
        </p>
      </div>
    </body>
    </html>
    """)

_PATIENT_TEMPLATE = _env.from_string("""
    <!DOCTYPE html>
    <html>
    <head>
      <meta charset="UTF-8">
      <meta name="viewport" content="width=device-width, initial-scale=1.0">
      <title>Data Security Incident Notification</title>
    </head>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 800px; margin: 0 auto; padding: 20px;">
      <div style="background-color: #f8f9fa; padding: 30px; border-radius: 10px; border-left: 4px solid #dc3545;">
        <h1 style="color: #dc3545; margin-top: 0;">Important Security Notice</h1>
        <p style="font-size: 16px; color: #555; margin-bottom: 20px;">Dear {{ patient_name }},</p>
        <p style="font-size: 16px; color: #555; margin-bottom: 20px;">
          We are writing to inform you of a data security incident that may have affected your personal information.
        </p>

        <div style="background-color: #ffffff; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
          <h2 style="color: #2c3e50; margin-top: 0; font-size: 18px;">What Happened?</h2>
          <p style="margin: 0; white-space: pre-wrap;">{{ description }}</p>
        </div>

        <div style="background-color: #ffffff; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
          <h2 style="color: #2c3e50; margin-top: 0; font-size: 18px;">What Information Was Involved?</h2>
          <p style="margin: 0;">The following types of information may have been affected: <strong>{{ data_types }}</strong></p>
          <p style="margin: 10px 0 0 0; font-size: 14px; color: #666;">Date of incident: {{ detected }}</p>
        </div>

        <div style="background-color: #e7f3ff; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
          <h2 style="color: #0066cc; margin-top: 0; font-size: 18px;">What We Are Doing</h2>
          <ul style="margin: 0; padding-left: 20px;">
            <li>We have taken immediate steps to contain the incident</li>
            <li>We are conducting a thorough investigation</li>
            <li>We are implementing additional security measures</li>
            <li>We are notifying all affected individuals</li>
            <li>We are working with relevant authorities as required</li>
          </ul>
        </div>

        <div style="background-color: #fff3cd; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
          <h2 style="color: #856404; margin-top: 0; font-size: 18px;">What You Can Do</h2>
          <ul style="margin: 0; padding-left: 20px; color: #856404;">
            <li>Monitor your accounts and statements for any unusual activity</li>
            <li>Review your credit reports regularly</li>
            <li>Be cautious of suspicious emails or phone calls</li>
            <li>Consider placing a fraud alert on your credit file</li>
            <li>Report any suspicious activity immediately</li>
          </ul>
        </div>

        <div style="background-color: #d1ecf1; padding: 15px; border-radius: 8px; border-left: 4px solid #0c5460; margin-top: 20px;">
          <p style="margin: 0; font-size: 14px; color: #0c5460;">
            <strong>For More Information:</strong><br>
            If you have questions or concerns about this incident, please contact us using the contact information provided in our privacy policy or patient portal.
          </p>
        </div>

        <div style="background-color: #f8f9fa; padding: 15px; border-radius: 8px; margin-top: 20px;">
          <p style="margin: 0; font-size: 14px; color: #666;">
            We sincerely apologize for any concern this may cause. The security and privacy of your information is of the utmost importance to us.
          </p>
        </div>

        <hr style="border: none; border-top: 1px solid #eee; margin: 30px 0;">
        <p style="font-size: 12px; color: #999; text-align: center; margin: 0;">
          This notification is sent in compliance with applicable data protection regulations.<br>
          Please do not reply to this email. For questions, please use the contact information provided above.
        </p>
      </div>
    </body>
    </html>
    """)

_ALERT_TEMPLATE = _env.from_string("""
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Breach Incident Alert</title>
</head>
<body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; background-color: #f3f4f6;">
  <table role="presentation" style="width: 100%; border-collapse: collapse; background-color: #f3f4f6; padding: 20px;">
    <tr>
      <td align="center">
        <table role="presentation" style="max-width: 600px; width: 100%; background-color: #ffffff; border-radius: 12px; overflow: hidden;">
          <tr>
            <td style="background-color: {{ color }}; padding: 30px 40px; text-align: center;">
              <h1 style="margin: 0; color: #ffffff; font-size: 24px; font-weight: 600;">Breach Incident Alert</h1>
            </td>
          </tr>
          <tr>
            <td style="padding: 20px 40px 0;">
              <div style="display: inline-block; background-color: {{ color }}15; color: {{ color }}; padding: 6px 16px; border-radius: 20px; font-size: 12px; font-weight: 600; text-transform: uppercase;">
                {{ severity_label }}
              </div>
            </td>
          </tr>
          <tr>
            <td style="padding: 30px 40px;">
              <h2 style="margin: 0 0 20px 0; color: #111827; font-size: 20px;">{{ incident_type }} (Incident #{{ incident_id }})</h2>
              <div style="background-color: #f9fafb; padding: 20px; border-radius: 8px; border-left: 4px solid {{ color }}; margin-bottom: 24px;">
                <p style="margin: 0; color: #374151; font-size: 16px; white-space: pre-wrap;">{{ description }}</p>
              </div>
              <table role="presentation" style="width: 100%; border-collapse: collapse; margin-bottom: 24px;">
                <tr>
                  <td style="padding: 12px 0; border-bottom: 1px solid #e5e7eb;">
                    <strong style="color: #6b7280; font-size: 13px; text-transform: uppercase;">Detected</strong>
                    <p style="margin: 4px 0 0 0; color: #111827; font-size: 15px;">{{ detected }}</p>
                  </td>
                </tr>
                <tr>
                  <td style="padding: 12px 0; border-bottom: 1px solid #e5e7eb;">
                    <strong style="color: #6b7280; font-size: 13px; text-transform: uppercase;">Affected Data Types ({{ data_type_count }})</strong>
                    <p style="margin: 4px 0 0 0; color: #111827; font-size: 15px;">{{ data_types }}</p>
                  </td>
                </tr>
                <tr>
                  <td style="padding: 12px 0; border-bottom: 1px solid #e5e7eb;">
                    <strong style="color: #6b7280; font-size: 13px; text-transform: uppercase;">Affected Users</strong>
                    <p style="margin: 4px 0 0 0; color: #111827; font-size: 15px;">{{ affected_count }} user(s)</p>
                  </td>
                </tr>
              </table>
              <div style="text-align: center; margin-top: 32px;">
                <a href="{{ link }}" style="display: inline-block; background-color: #14b8a6; color: #ffffff; padding: 14px 32px; text-decoration: none; border-radius: 8px; font-weight: 600;">
                  View in Breach Management
                </a>
              </div>
            </td>
          </tr>
          <tr>
            <td style="background-color: #f9fafb; padding: 24px 40px; text-align: center; border-top: 1px solid #e5e7eb;">
              <p style="margin: 0 0 8px 0; color: #6b7280; font-size: 13px;">This is an automated breach alert from the</p>
              <p style="margin: 0; color: #9ca3af; font-size: 12px;"><strong>{{ organisation }}</strong></p>
              <p style="margin: 12px 0 0 0; color: #9ca3af; font-size: 11px;">
                Regulatory notification deadlines may apply. Review the incident and decide on GDPR / HIPAA notifications.
              </p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
""")


def render_gdpr_supervisory_template(
    incident: Any,
    recipient: Any,
    dpo_info: Optional[DPOContactInfo] = None,
) -> RenderedEmail:
    """
    GDPR supervisory authority notification (Article 33, 72-hour requirement).

    The DPO block is rendered only when dpo_info carries a name; otherwise a
    generic pointer to the privacy policy is used.
    """
    _require(incident, recipient)

    html = _GDPR_TEMPLATE.render(
        incident_id=incident.id,
        incident_type=format_incident_type(getattr(incident, "incident_type", None)),
        severity_color=get_severity_color(getattr(incident, "severity", None)),
        severity_label=_severity_label(incident),
        detected=format_date_long_gb(getattr(incident, "detected_at", None)),
        data_types=_joined_data_types(incident, "Not specified"),
        affected_count=_affected_count(incident),
        description=clean_incident_description(getattr(incident, "description", None)),
        dpo=dpo_info if dpo_info is not None and dpo_info.name else None,
        organisation=ORGANISATION_NAME,
    )
    return RenderedEmail(subject=f"GDPR Data Breach Notification - Incident #{incident.id}", html=html)


def render_hipaa_hhs_template(incident: Any, recipient: Any) -> RenderedEmail:
    """HIPAA Breach Notification Rule report to HHS (45 CFR 164.400-414)."""
    _require(incident, recipient)

    html = _HIPAA_TEMPLATE.render(
        incident_id=incident.id,
        incident_type=getattr(incident, "incident_type", None) or "Not specified",
        severity_color=get_severity_color(getattr(incident, "severity", None)),
        severity_label=_severity_label(incident),
        detected=format_date_long_us(getattr(incident, "detected_at", None)),
        data_types=_joined_data_types(incident, "Not specified"),
        affected_count=_affected_count(incident),
        description=getattr(incident, "description", None) or "No description provided.",
    )
    return RenderedEmail(subject=f"HIPAA Breach Notification - Incident #{incident.id}", html=html)


def render_individual_patient_template(incident: Any, patient: Any) -> RenderedEmail:
    """
    Notice to an affected patient.

    The subject is fixed and the body never shows the incident id, so
    internal identifiers do not reach patients.
    """
    _require(incident, patient, recipient_label="patient")

    html = _PATIENT_TEMPLATE.render(
        patient_name=getattr(patient, "name", None) or "Valued Patient",
        data_types=_joined_data_types(incident, "your personal information"),
        detected=format_date_long_us(getattr(incident, "detected_at", None)),
        description=(
            getattr(incident, "description", None)
            or "A security incident was detected that may have involved your personal information."
        ),
    )
    return RenderedEmail(subject=INDIVIDUAL_PATIENT_SUBJECT, html=html)


def render_breach_alert(incident: Any, dashboard_url: str) -> RenderedEmail:
    """Internal stakeholder alert sent when an incident is recorded."""
    if incident is None:
        raise InvalidArgumentError("incident is required")

    severity = (getattr(incident, "severity", None) or "").lower()
    incident_type = format_incident_type(getattr(incident, "incident_type", None))

    html = _ALERT_TEMPLATE.render(
        color=_ALERT_SEVERITY_COLORS.get(severity, _ALERT_DEFAULT_COLOR),
        severity_label=_severity_label(incident),
        incident_type=incident_type,
        incident_id=incident.id,
        description=clean_incident_description(getattr(incident, "description", None)),
        detected=format_date_long_us(getattr(incident, "detected_at", None)),
        data_types=_joined_data_types(incident, "Not specified"),
        data_type_count=len(getattr(incident, "affected_data_types", None) or []),
        affected_count=_affected_count(incident),
        link=f"{dashboard_url.rstrip('/')}/superadmin/breach-management",
        organisation=ORGANISATION_NAME,
    )
    subject = f"[{_severity_label(incident)}] Breach Incident Alert: {incident_type} (#{incident.id})"
    return RenderedEmail(subject=subject, html=html)
