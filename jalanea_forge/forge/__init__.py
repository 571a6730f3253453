"""
The Forge workflow.

- permissions: tier-based feature gating
- wizard: Idea -> Research -> PRD -> Realization step machine
- version_history: capped PRD history with revert
- autosave: state reducer and debounced project writer
- generation: prompts, LLM client and artifact generators
- service: orchestration of a generation against a project
"""
