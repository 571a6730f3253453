"""Jalanea Forge.

Backend of a product-design assistant that walks a user from a raw idea to a
buildable plan, with every artifact generated by a hosted LLM.

High-level architecture
-----------------------

A project moves through four wizard stages:

- **Idea**: the raw idea is refined into a vision statement.
- **Research**: a research mission prompt and a report template are produced;
  the user attaches research documents (text or PDF).
- **PRD**: a product requirements document is written from the vision and the
  research; each rewrite is kept in a capped version history.
- **Realization**: a phased roadmap, design-tool prompts and an integration
  prompt are produced from the PRD.

Core subpackages
----------------

- ``jalanea_forge.core``: logging, monitoring, persistence (SQLModel entities
  and async repositories) and the domain/IO models.
- ``jalanea_forge.forge``: the workflow itself (tier permissions, wizard
  transitions, PRD history, debounced autosave and AI generation).
- ``jalanea_forge.billing``: pricing tiers and Stripe checkout/webhooks.
- ``jalanea_forge.notifications``: transactional emails sent through Resend.
- ``jalanea_forge.lab``: the owner's personal project dashboard.
- ``jalanea_forge.server``: the FastAPI application exposing all of the above.
"""

__version__ = "1.0.0"
