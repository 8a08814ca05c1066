"""
Service classification from a port number and an optional banner.

The static port table is the primary signal. A banner that carries a
recognizable protocol preamble overrides it, so an SSH daemon moved to
port 2222, or a web server on 22, is reported by what it actually speaks.
"""
from __future__ import annotations

import re
from typing import Optional, Tuple

COMMON_SERVICES = {
    20: "FTP-data",
    21: "FTP",
    22: "SSH",
    23: "Telnet",
    25: "SMTP",
    53: "DNS",
    80: "HTTP",
    110: "POP3",
    111: "RPCbind",
    135: "MSRPC",
    139: "NetBIOS",
    143: "IMAP",
    389: "LDAP",
    443: "HTTPS",
    445: "SMB",
    465: "SMTPS",
    587: "SMTP",
    993: "IMAPS",
    995: "POP3S",
    1433: "MSSQL",
    1521: "Oracle",
    3306: "MySQL",
    3389: "RDP",
    5432: "PostgreSQL",
    5900: "VNC",
    6379: "Redis",
    8000: "HTTP",
    8080: "HTTP",
    8443: "HTTPS",
    27017: "MongoDB",
}

# Ordered: the first matching preamble wins
_PREAMBLES: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"^SSH-\d+\.\d+-"), "SSH"),
    (re.compile(r"^HTTP/\d(\.\d)?\s+\d{3}"), "HTTP"),
    (re.compile(r"^\+OK\b"), "POP3"),
    (re.compile(r"^\* (OK|PREAUTH)\b"), "IMAP"),
    (re.compile(r"^RFB \d{3}\.\d{3}"), "VNC"),
    (re.compile(r"^-(ERR|NOAUTH)\b"), "Redis"),
)

# "220" is shared by SMTP and FTP greetings
_SMTP_HINT = re.compile(r"E?SMTP|Postfix|Exim|Sendmail|mail", re.IGNORECASE)
_FTP_HINT = re.compile(r"FTP", re.IGNORECASE)


def _mysql_handshake(banner: str) -> bool:
    # MySQL greeting: 3-byte length, seq 0, protocol version 10, version string
    return len(banner) > 5 and banner[3] == "\x00" and banner[4] == "\x0a"


def classify_banner(banner: Optional[str]) -> Optional[str]:
    if not banner:
        return None
    text = banner.lstrip("\r\n ")
    for pattern, name in _PREAMBLES:
        if pattern.match(text):
            return name

    if text.startswith("220"):
        line = text.splitlines()[0] if text.splitlines() else text
        if _SMTP_HINT.search(line):
            return "SMTP"
        if _FTP_HINT.search(line):
            return "FTP"
        return None

    if _mysql_handshake(banner):
        return "MySQL"
    return None


def classify(port: int, banner: Optional[str] = None) -> Optional[str]:
    """Returns a service name, or None when neither signal is informative."""
    from_banner = classify_banner(banner)
    if from_banner:
        return from_banner

    by_port = COMMON_SERVICES.get(port)
    if by_port:
        return by_port

    return None
