"""
Steel Production Dashboard

Simulated steel-production KPIs (coils, tonnage, shipments, yield,
efficiency, quality, energy) presented as cards that refresh on a timer,
with card metadata mirrored to a document store and to local storage.

To plug in a hosted document database:
    Subclass stores.CardStore and pass an instance to
    lifecycle.CardDataManager. Local storage and the offline queue keep
    working unchanged.

To connect to Streamlit/Dash:
    Call dashboard.get_dashboard_overview(manager.cards, period) to get a
    plain dict suitable for rendering cards, badges and progress bars.

To add a new metric type:
    Add an entry to config.CARD_REGISTRY with its direction, unit, default
    title and (min, max, decimals) ranges. The simulator builds a generator
    from the ranges; add a formatter to formatting.VALUE_FORMATTERS only if
    the type needs a unit other than the plain period-scaled number.
"""

__version__ = "0.1.0"
