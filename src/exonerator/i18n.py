"""
Internationalization (i18n) module for the exonerator system.

Provides translations for all user-facing messages in German (de) and English (en).
"""

from typing import Optional


# Supported languages
SUPPORTED_LANGUAGES = frozenset({"de", "en"})
DEFAULT_LANGUAGE = "en"


# Translation dictionary with all messages
# Structure: {message_key: {language_code: translated_message}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    "language.name": {
        "de": "Deutsch",
        "en": "English",
    },

    # Form
    "form.explanation": {
        "de": "Gib eine IP-Adresse und ein Datum ein, um herauszufinden, ob diese Adresse ein Tor-Relay war:",
        "en": "Enter an IP address and date to find out whether that address was used as a Tor relay:",
    },

    # Summary panels
    "summary.heading": {
        "de": "Zusammenfassung",
        "en": "Summary",
    },
    "summary.serverproblem.dbnoconnect.title": {
        "de": "Serverproblem",
        "en": "Server problem",
    },
    "summary.serverproblem.dbnoconnect.body": {
        "de": "Es konnte keine Verbindung zur Datenbank hergestellt werden. Bitte versuche es später erneut. Falls das Problem bestehen bleibt, kontaktiere uns.",
        "en": "Unable to connect to the database. Please try again later. If this problem persists, please contact us.",
    },
    "summary.serverproblem.dbempty.title": {
        "de": "Serverproblem",
        "en": "Server problem",
    },
    "summary.serverproblem.dbempty.body": {
        "de": "Die Datenbank scheint leer zu sein. Bitte versuche es später erneut. Falls das Problem bestehen bleibt, kontaktiere uns.",
        "en": "The database appears to be empty. Please try again later. If this problem persists, please contact us.",
    },
    "summary.serverproblem.nodata.title": {
        "de": "Serverproblem",
        "en": "Server problem",
    },
    "summary.serverproblem.nodata.body": {
        "de": "Für das angefragte Datum liegen keine Daten vor. Bitte versuche es später erneut. Falls das Problem bestehen bleibt, kontaktiere uns.",
        "en": "The database does not contain any data for the requested date. Please try again later. If this problem persists, please contact us.",
    },
    "summary.invalidparams.noip.title": {
        "de": "Keine IP-Adresse angegeben",
        "en": "No IP address given",
    },
    "summary.invalidparams.noip.body": {
        "de": "Bitte gib eine IP-Adresse an.",
        "en": "Please provide an IP address.",
    },
    "summary.invalidparams.notimestamp.title": {
        "de": "Kein Datum angegeben",
        "en": "No date parameter given",
    },
    "summary.invalidparams.notimestamp.body": {
        "de": "Bitte gib ein Datum an.",
        "en": "Please provide a date parameter.",
    },
    "summary.invalidparams.invalidip.title": {
        "de": "Ungültige IP-Adresse",
        "en": "Invalid IP address",
    },
    "summary.invalidparams.invalidip.body": {
        "de": "Entschuldigung, {value} ist keine gültige IP-Adresse. Erwartete IP-Adressformate sind {ipv4} oder {ipv6}.",
        "en": "Sorry, {value} is not a valid IP address. The expected IP address formats are {ipv4} or {ipv6}.",
    },
    "summary.invalidparams.invalidtimestamp.title": {
        "de": "Ungültiges Datum",
        "en": "Invalid date parameter",
    },
    "summary.invalidparams.invalidtimestamp.body": {
        "de": "Entschuldigung, {value} ist kein gültiges Datum. Das erwartete Datumsformat ist {format}.",
        "en": "Sorry, {value} is not a valid date. The expected date format is {format}.",
    },
    "summary.invalidparams.timestamptoorecent.title": {
        "de": "Datum zu aktuell",
        "en": "Date parameter too recent",
    },
    "summary.invalidparams.timestamptoorecent.body": {
        "de": "Die Datenbank enthält möglicherweise noch nicht genug Daten, um diese Anfrage korrekt zu beantworten. Die neuesten akzeptierten Daten sind von vorgestern. Bitte wiederhole die Suche an einem anderen Tag.",
        "en": "The database may not yet contain enough data to correctly answer this request. The latest accepted data is from the day before yesterday. Please repeat your search on another day.",
    },
    "summary.invalidparams.timestamprange.title": {
        "de": "Datum außerhalb des Bereichs",
        "en": "Date parameter out of range",
    },
    "summary.invalidparams.timestamprange.body": {
        "de": "Entschuldigung, {date} liegt außerhalb des Bereichs der Datenbank. Die Datenbank enthält Daten von {first} bis {last}.",
        "en": "Sorry, {date} is outside of the database range. The database contains data from {first} to {last}.",
    },
    "summary.negativesamenetwork.title": {
        "de": "Ergebnis negativ",
        "en": "Result is negative",
    },
    "summary.negativesamenetwork.body": {
        "de": "Wir haben keine Daten für {address} am {date} gefunden, aber wir haben andere IP-Adressen von Tor-Relays im selben /{prefix}-Netz zur selben Zeit gefunden:",
        "en": "We did not find IP address {address} on or within a day of {date}. But we did find other IP addresses of Tor relays in the same /{prefix} network around the time:",
    },
    "summary.positive.title": {
        "de": "Ergebnis positiv",
        "en": "Result is positive",
    },
    "summary.positive.body": {
        "de": "Wir haben eine oder mehrere Tor-Relays an der IP-Adresse {address} am oder um den {date} gefunden, wie von Tor-Clients gemeldet.",
        "en": "We found one or more Tor relays on IP address {address} on or within a day of {date} that Tor clients were likely to know.",
    },
    "summary.negative.title": {
        "de": "Ergebnis negativ",
        "en": "Result is negative",
    },
    "summary.negative.body": {
        "de": "Wir haben keine Daten für IP-Adresse {address} am oder um den {date} gefunden.",
        "en": "We did not find IP address {address} on or within a day of {date}.",
    },

    # Technical details table
    "technicaldetails.heading": {
        "de": "Technische Details",
        "en": "Technical details",
    },
    "technicaldetails.pre": {
        "de": "Suche nach IP-Adresse {address} am oder um den {date}. Tor-Clients kannten möglicherweise diese Relays:",
        "en": "Looking up IP address {address} on or within one day of {date}. Tor clients could have selected these Tor relays to build circuits.",
    },
    "technicaldetails.colheader.timestamp": {
        "de": "Zeitstempel (UTC)",
        "en": "Timestamp (UTC)",
    },
    "technicaldetails.colheader.ip": {
        "de": "IP-Adresse(n)",
        "en": "IP address(es)",
    },
    "technicaldetails.colheader.fingerprint": {
        "de": "Identitätsfingerabdruck",
        "en": "Identity fingerprint",
    },
    "technicaldetails.colheader.nickname": {
        "de": "Spitzname",
        "en": "Nickname",
    },
    "technicaldetails.colheader.exit": {
        "de": "Exit-Relay",
        "en": "Exit relay",
    },
    "technicaldetails.nickname.unknown": {
        "de": "Unbekannt",
        "en": "Unknown",
    },
    "technicaldetails.exit.unknown": {
        "de": "Unbekannt",
        "en": "Unknown",
    },
    "technicaldetails.exit.yes": {
        "de": "Ja",
        "en": "Yes",
    },
    "technicaldetails.exit.no": {
        "de": "Nein",
        "en": "No",
    },
    "permanentlink.heading": {
        "de": "Permanenter Link",
        "en": "Permanent link",
    },

    # Error messages
    "error.general": {
        "de": "Allgemeiner Fehler.",
        "en": "General error.",
    },
    "error.config": {
        "de": "Konfiguration konnte nicht geladen werden: {error}",
        "en": "Could not load configuration: {error}",
    },

    # CLI messages
    "cli.looking_up": {
        "de": "Suche {address} am {date} ...",
        "en": "Looking up {address} on {date} ...",
    },
    "cli.simulation": {
        "de": "Simulationsmodus aktiv - keine echten Netzwerkanfragen",
        "en": "Simulation mode active - no real network requests",
    },
    "cli.related_link": {
        "de": "Neue Suche",
        "en": "Look up",
    },

    # Self-test messages
    "selftest.header": {
        "de": "Selbsttest",
        "en": "Self-test",
    },
    "selftest.config_validation": {
        "de": "Konfigurationsprüfung:",
        "en": "Configuration validation:",
    },
    "selftest.config_valid": {
        "de": "Konfiguration ist gültig",
        "en": "Configuration is valid",
    },
    "selftest.config_invalid": {
        "de": "Konfiguration ist ungültig",
        "en": "Configuration is invalid",
    },
    "selftest.warnings": {
        "de": "Warnungen:",
        "en": "Warnings:",
    },
    "selftest.connectivity": {
        "de": "Verbindungstest:",
        "en": "Connectivity test:",
    },
    "selftest.skipped": {
        "de": "Verbindungstest im Simulationsmodus übersprungen",
        "en": "Connectivity test skipped in simulation mode",
    },
    "selftest.success": {
        "de": "Selbsttest erfolgreich",
        "en": "Self-test passed",
    },
    "selftest.failed": {
        "de": "Selbsttest fehlgeschlagen",
        "en": "Self-test failed",
    },
    "selftest.duration": {
        "de": "Dauer",
        "en": "Duration",
    },
}


def get_message(key: str, language: str = DEFAULT_LANGUAGE, **kwargs) -> str:
    """
    Get a translated message by key.

    Args:
        key: The message key (e.g., 'summary.positive.title')
        language: The language code ('de' or 'en')
        **kwargs: Format arguments for the message template

    Returns:
        The translated and formatted message. Falls back to the default
        language, then to the key itself.
    """
    translations = TRANSLATIONS.get(key)

    if translations is None:
        return key

    message: Optional[str] = translations.get(language)

    if message is None:
        message = translations.get(DEFAULT_LANGUAGE)

    if message is None:
        return key

    if kwargs:
        try:
            message = message.format(**kwargs)
        except KeyError:
            # Missing placeholder argument, return the unformatted message
            pass

    return message


def get_all_message_keys() -> set[str]:
    """Get all available message keys."""
    return set(TRANSLATIONS.keys())


def has_translation(key: str, language: str) -> bool:
    """
    Check if a translation exists for a key and language.

    Args:
        key: The message key
        language: The language code

    Returns:
        True if translation exists, False otherwise.
    """
    translations = TRANSLATIONS.get(key)
    if translations is None:
        return False
    return language in translations


def get_missing_translations(language: str) -> set[str]:
    """
    Get all message keys that are missing translations for a language.

    Args:
        language: The language code to check

    Returns:
        Set of message keys missing translations for the specified language.
    """
    missing = set()
    for key, translations in TRANSLATIONS.items():
        if language not in translations:
            missing.add(key)
    return missing


def validate_translations() -> dict[str, set[str]]:
    """
    Validate that all languages have all translations.

    Returns:
        Dictionary mapping language codes to sets of missing message keys.
        Empty sets indicate complete translations.
    """
    return {
        language: get_missing_translations(language)
        for language in SUPPORTED_LANGUAGES
    }
