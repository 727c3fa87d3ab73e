"""Constants for the sked adapter."""

# HTTP headers
DEFAULT_HEADERS = {
    "Accept": "text/html",
}

# Column headers of the sked list view (lowercased)
LIST_DATE_HEADERS = ("datum", "tag")
LIST_START_HEADERS = ("von", "beginn", "start")
LIST_END_HEADERS = ("bis", "ende", "end")
LIST_TITLE_HEADERS = ("veranstaltung", "lehrveranstaltung", "titel", "modul")
LIST_LECTURER_HEADERS = ("dozent", "dozenten", "lehrende", "lehrender")
LIST_ROOM_HEADERS = ("raum", "räume", "ort")
LIST_INFO_HEADERS = ("bemerkung", "bemerkungen", "info")
LIST_ORGANISER_HEADERS = ("fakultät", "organisator", "org")
