"""
Santuario — A Stoic Journaling Sanctuary
==========================================
Daily readings, ritualized morning/evening journaling, mood and challenge
tracking, XP/levels, and an AI mentor that reviews the day.  Every user sees
the same "daily" content for a calendar date without any server-side
scheduling, and each day's journal is a single document whose ritual blocks
stay in a fixed order no matter how often they are rewritten.

Package layout::

    santuario/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Levels, XP awards, slot salts, ritual catalogue
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   ├── models.py      # All ORM models
    │   └── seed.py        # Starter content seeder
    ├── engine/
    │   ├── dates.py       # ISO calendar-date helpers
    │   ├── records.py     # Boundary data structures for content rows
    │   ├── daily.py       # Seeded daily selector
    │   ├── journal.py     # Journal document parse / merge / display split
    │   ├── events.py      # JournalEvent envelope
    │   └── reward.py      # XP award + level calculation
    ├── services/
    │   ├── content_service.py  # Collection snapshots + daily selection
    │   ├── journal_service.py  # Per-day entry persistence
    │   ├── reward_service.py   # Idempotent XP ledger
    │   ├── library_service.py  # Saved readings
    │   └── mentor_service.py   # External AI mentor with static fallback
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # JWT verification, engine/config providers
        ├── rate_limit.py  # Per-user mentor call throttle
        └── routes/        # today, journal, profile, library
"""

__version__ = "0.1.0"
