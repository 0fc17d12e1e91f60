"""
Installation instructions per email client.
"""

from enum import Enum
from typing import Dict, List, Optional


class EmailClient(str, Enum):
    GMAIL = "gmail"
    OUTLOOK = "outlook"
    APPLE = "apple"


CLIENT_NAMES = {
    EmailClient.GMAIL: "Gmail",
    EmailClient.OUTLOOK: "Outlook",
    EmailClient.APPLE: "Apple Mail",
}

INSTALL_STEPS: Dict[EmailClient, List[str]] = {
    EmailClient.GMAIL: [
        'Copy the desired signature HTML using the "Copy" button.',
        'In Gmail, go to Settings > See all settings.',
        'Under the "General" tab, scroll down to the "Signature" section.',
        'Click "Create new", give your signature a name, and paste the copied HTML into the editor box.',
        'Configure your signature defaults for new emails and replies.',
        'Scroll to the bottom and click "Save Changes".',
    ],
    EmailClient.OUTLOOK: [
        'Copy the desired signature HTML using the "Copy" button.',
        'In the Outlook desktop app, go to File > Options > Mail > Signatures.',
        'Click "New", provide a name, and click OK.',
        'In the editor, paste your signature. For best results, open the HTML in a web browser, '
        'select all (Ctrl+A), copy the visual content, and paste that into the Outlook editor.',
        'Set your default signature for new messages and replies/forwards.',
        'Click "OK" to save.',
    ],
    EmailClient.APPLE: [
        'Copy the desired signature HTML using the "Copy" button.',
        'In Apple Mail, open Mail > Preferences (or Settings).',
        'Go to the "Signatures" tab.',
        'Select the email account you want to associate the signature with and click the "+" button.',
        'Give your signature a name. IMPORTANT: Uncheck the "Always match my default message font" option.',
        'Paste the signature into the signature editor box on the right.',
        'Close the preferences window to save. The preview may look off, '
        'but the signature renders correctly in sent emails.',
    ],
}


def get_install_guide(client: Optional[EmailClient] = None) -> List[Dict[str, object]]:
    """Steps for one client, or for all of them in display order."""
    clients = [client] if client else list(EmailClient)
    return [
        {
            "client": c.value,
            "name": CLIENT_NAMES[c],
            "steps": list(INSTALL_STEPS[c]),
        }
        for c in clients
    ]
