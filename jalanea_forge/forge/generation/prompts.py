"""Prompt templates and system instructions for every generated artifact."""

from __future__ import annotations

from datetime import date
from typing import Optional

# Design prompts only see the head of the PRD.
DESIGN_PRD_CONTEXT_CHARS = 1500

# =====================================================================
# System instructions
# =====================================================================

VISION_SYSTEM = (
    "You are a Chief Product Officer. Your goal is to clarify and elevate raw ideas into actionable product visions."
)

ROADMAP_SYSTEM = (
    "You are a Technical Project Manager. You advocate for the 'Hybrid' approach: letting users build simple "
    "things (DIY) but identifying high-risk areas where hiring an expert is smarter. Return raw JSON."
)

BUG_REPORT_SYSTEM = (
    "You are a Senior Support Engineer. Translate user errors into actionable technical bug reports. Return raw JSON."
)

PRD_REFINEMENT_SYSTEM = (
    "You are an AI Product Editor. Your goal is to refine the PRD exactly as requested while maintaining "
    "structural integrity."
)

CODE_PROMPT_SYSTEM = "You are a Lead Software Engineer. You write precise, technical specifications for other developers."


def prd_system(today: Optional[date] = None) -> str:
    today = today or date.today()
    return (
        "You are a world-class Product Manager. You are strict, detailed, and focus on viability and user value. "
        f"Current Date: {today.strftime('%m/%d/%Y')}"
    )


# =====================================================================
# Fallbacks used when the model returns no text
# =====================================================================

VISION_FALLBACK = "Failed to refine idea."
PRD_FALLBACK = "Failed to generate PRD."
STITCH_FALLBACK = "Failed to generate Stitch prompt."
OPAL_FALLBACK = "Failed to generate Opal prompt."
CODE_PROMPT_FALLBACK = "Failed to generate Integration Prompt."
BUG_REPORT_FALLBACK_SUBJECT = "Error Report"

# =====================================================================
# Prompt builders
# =====================================================================


def vision_prompt(raw_input: str) -> str:
    return f"""
Analyze the following raw product idea and synthesize it into a clear, professional Product Vision Statement.

RAW IDEA:
{raw_input}

TASK:
Create a structured Vision Statement including:
1. Product Name Suggestion
2. Core Value Proposition (The "Why")
3. Target Users (The "Who")
4. Key Differentiators (The "How")
5. Elevator Pitch (One concise sentence)

Output in Markdown. Keep it professional and inspiring.
"""


def research_mission_prompt(synthesized_idea: str) -> str:
    return f"""
Based on the following Product Vision, generate a specific, high-level "Deep Research Mission" prompt for an autonomous AI research agent (like Google NotebookLM Deep Research).

The mission should instruct the agent to:
1. Find direct and indirect competitors.
2. Uncover recent trends in the specific market.
3. Identify user demographics and pain points.
4. Look for technical feasibility and similar existing implementations.

Keep the mission prompt concise (under 3 sentences) but directive. Start with "Your mission is to..."
refer explicitly to the product concept described below. Do NOT invent a fake company name (like "VentureSpark") unless the vision explicitly names one. Use "this product" or "the proposed solution" instead.

Product Vision:
{synthesized_idea}
"""


REPORT_GENERATION_PROMPT = """Please generate a detailed research report addressing the following sections:

**1. Competitor Analysis:**
Identify and analyze 3-5 direct and indirect competitors. For each competitor, describe their primary offerings, target audience, key strengths, and weaknesses. Specifically, evaluate how well they currently address (or fail to address) the needs that this product aims to solve.

**2. User Pain Point Deep Dive:**
Conduct a detailed deep dive into the specific, acute pain points experienced by the target users identified in the vision. What are their most significant frustrations? Elaborate on how existing solutions might fall short, creating a market opportunity.

**3. Technical Feasibility Check:**
Assess the technical feasibility of the product's "Key Differentiators." Discuss:
    *   **Current Technological Landscape:** Are the necessary technologies (AI models, APIs, data sources) readily available?
    *   **Potential Technical Challenges:** What are the significant hurdles (e.g., accuracy, privacy, latency)?
    *   **Existing Solutions:** Are there precedents that demonstrate feasibility?

**4. Strategic Opportunities & Market Gaps:**
Identify strategic opportunities or underserved gaps in the market that this product could uniquely leverage. Consider emerging trends, unmet needs, and potential for new business models."""


def prd_prompt(idea: str) -> str:
    return f"""
Analyze the following product vision and the provided research documents (if any).

PRODUCT VISION:
{idea}

TASK:
Create a comprehensive Product Requirements Document (PRD).
The Output must be formatted in Markdown.
Include:
1. Executive Summary
2. Problem Statement
3. Target Audience (User Personas)
4. Key Features (Functional Requirements)
5. Success Metrics (KPIs)
6. Risks & Mitigation
"""


def research_document_part(name: str, content: str) -> str:
    return f"--- RESEARCH DOCUMENT: {name} ---\n{content}\n--- END DOCUMENT ---"


def roadmap_prompt(prd: str) -> str:
    return f"""
Based on the following PRD, create a step-by-step Implementation Plan (Roadmap).

PRD CONTENT:
{prd}

TASK:
Create a phased roadmap (Phase 1: MVP, Phase 2: Polish, Phase 3: Scale).

CRITICAL OUTPUT FORMAT:
You must output a strictly valid JSON array of objects. Do not wrap in markdown or code blocks.
Each object must have:
- "phaseName": string (e.g., "Phase 1: MVP")
- "description": string (Summary of goals)
- "steps": array of objects, where each object has:
    - "stepName": string (e.g., "Setup Authentication")
    - "description": string (User-facing summary)
    - "technicalBrief": string (Explanation of complexity)
    - "systemPrompt": string (Google AI Studio SYSTEM INSTRUCTION. Must define the Persona, Tech Stack, and Coding Standards. e.g. "You are a Senior React Engineer. Stack: Next.js 14, Tailwind. Rules: Use TypeScript, functional components...")
    - "diyPrompt": string (Google AI Studio USER PROMPT. The specific task instruction. e.g. "Create a responsive Navbar component with the following links...")
    - "hirePitch": string (A concise reason to hire an expert, e.g., "Authentication security errors can cost $10k+ to fix.")

Example Output Structure:
[
  {{
    "phaseName": "Phase 1: Foundation",
    "description": "...",
    "steps": [
       {{
         "stepName": "Setup Next.js",
         "description": "Initialize the app repo.",
         "technicalBrief": "...",
         "systemPrompt": "Act as a Senior React Engineer. You are building 'DogWalkerAI'.\\nStack: Next.js 14, Supabase, Tailwind, Framer Motion.\\nCoding Standards: Functional components, TypeScript, strict types.",
         "diyPrompt": "Initialize a new Next.js 14 project using the App Router. Remove the default boilerplate css. Setup the folder structure for 'components', 'lib', and 'hooks'.",
         "hirePitch": "..."
       }}
    ]
  }}
]
"""


def bug_report_prompt(error: str, context: str) -> str:
    return f"""
Analyze the following error report from a user building an AI app.

PROJECT CONTEXT:
{context}

USER ERROR LOG / FEEDBACK:
{error}

TASK:
Create a professional email bug report that the user can send to the developer (Me).
1. "subject": A concise subject line (e.g., "Bug Report: Firebase Config Error").
2. "body": A clear email body explaining the issue, potential causes, and suggested solutions based on the error.

OUTPUT FORMAT:
Strict valid JSON: {{ "subject": "...", "body": "..." }}
"""


def prd_refinement_prompt(current_prd: str, instructions: str) -> str:
    return f"""
You are an expert Product Manager.

CURRENT PRD:
{current_prd}

USER REFINEMENT INSTRUCTIONS:
{instructions}

TASK:
Rewrite the PRD to incorporate the user's instructions.
Maintain the original structure/markdown format unless asked to change it.
Ensure the tone remains professional and the requirements are clear.
Return the FULL updated PRD.
"""


def stitch_prompt(prd: str) -> str:
    return f"""
Based on the following PRD and Roadmap, create a detailed prompt for "Stitch", a frontend generation tool.

PRD CONTEXT: {prd[:DESIGN_PRD_CONTEXT_CHARS]}...

TASK:
Write a prompt that instructs Stitch to:
1. Define the Visual Identity (Color Palette, Typography, Vibe).
2. Create the Component Library (Buttons, Cards, Inputs).
3. Generate the Page Layouts (Home, Dashboard, Settings).
4. Focus on modern, premium aesthetics (Glassmorphism/Neo-brutalism/Clean).

Output ONLY the raw prompt text for Stitch.
"""


def opal_prompt(prd: str) -> str:
    return f"""
Based on the following PRD and Roadmap, create a detailed prompt for "Opal", a backend logic generation tool.

PRD CONTEXT: {prd[:DESIGN_PRD_CONTEXT_CHARS]}...

TASK:
Write a prompt that instructs Opal to:
1. Define the Data Schema (Users, Projects, Items).
2. Outline the API Endpoints (REST/GraphQL).
3. Describe the Business Logic flows (Authentication, Data Processing).
4. Ensure security and scalability.

Output ONLY the raw prompt text for Opal.
"""


def integration_prompt(idea: str, stitch: str, opal: str, roadmap_json: str) -> str:
    return f"""
ACT AS: Lead Software Engineer & Integrator.

CONTEXT:
We are building a web application using the Stitch (Frontend) and Opal (Backend) workflow.

PROJECT IDEA:
{idea}

FRONTEND (Stitch) DIRECTION:
{stitch}

BACKEND (Opal) DIRECTION:
{opal}

ROADMAP (JSON):
{roadmap_json}

TASK:
Write a master "Integration Prompt" that the user can copy and paste into Google Gemini (or their IDE) to start building the application.
This prompt must:
1. Instruct how to scaffold the project (Vite + React + TS + Tailwind).
2. Explain how to implement the Stitch components (give structure).
3. Explain how to wire up the Opal logic/APIs.
4. Define the folder structure.

CRITICAL: Return ONLY the raw prompt text suitable for copy-pasting.
"""


# =====================================================================
# API key check and Lab brainstorm
# =====================================================================

KEY_TEST_PROMPT = 'Say "OK" in one word.'

BRAINSTORM_SYSTEM = """You are Jalanea's personal brainstorm partner and strategic advisor. You have deep context about their project ecosystem:

ACTIVE PROJECTS:
- Jalanea Works (jalanea.works) - Career matching platform for Valencia & UCF grads, LIVE
- Jalanea Forge (forge.jalanea.dev) - AI Product Designer, LIVE
- Jalnaea Dev (jalnaea.dev) - Private dev environment/command center, LIVE

IN DEVELOPMENT (The Lab):
- Jalanea ATS - ATS score checker for job applications
- Jalanea Astro - Astrology insights + scheduling readings
- Jalanea Prints - Creative marketplace for entrepreneurs
- Jalanea Finance - AI financial advisor for investments, property, cars
- Jalanea Fit - AI fitness coach based on user preferences
- Jalanea Spirit - Spirituality/Map of Consciousness reflection tool

Your role:
- Help brainstorm new features, strategies, and ideas
- Provide honest, direct feedback
- Think creatively and challenge assumptions
- Remember context from the conversation
- Be concise but thorough
- Speak like a trusted co-founder, not a corporate assistant"""
