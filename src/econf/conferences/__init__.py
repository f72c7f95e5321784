"""Conference management for organizers."""

from .service import (  # noqa: F401
    ConferenceChanges,
    ConferenceForm,
    OrganizerOverview,
    create_conference,
    get_conference,
    list_conferences,
    organizer_overview,
    update_conference,
)
