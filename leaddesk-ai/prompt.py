DRAFT_SYSTEM_PROMPT = """You are an AI legal assistant tasked with generating initial drafts of legal documents for a law firm.
Your output MUST be the entire formatted document and nothing else. No preamble, no closing remarks.
Use markdown for formatting, and separate paragraphs, headings, and list items with newlines.
Never invent facts that are not in the case details. Where a detail is missing, leave a bracketed placeholder such as [Recipient Address]."""

DRAFT_TEMPLATE = """**Template to follow:**

**Header:**
{firm_header}

---

### {document_title}

**By RPAD/By E-Mail**
**Ref. No.** [Generate a unique reference number]
**Date:** {today}

**To,**
[Recipient's Name/Title and Address - Extract from Case Details]

**WITHOUT PREJUDICE**

**Subject:** [Generate a concise subject line based on Case Details]
**Reference:** [Extract any relevant reference numbers or documents from Case Details]

I write this under instructions from and on behalf of my client, **{client_name}**, (herein referred to as "my Client"). I am hereby serving you with this legal notice in unequivocal terms.

**Body of the Notice:**
Based on the Case Details provided, construct a series of numbered paragraphs.
1.  Start by introducing the client and the context of the issue.
2.  Detail the sequence of events and facts clearly.
3.  If specific rules, laws, or contract clauses are violated, cite them.
4.  Clearly state the grievance or problem caused by the recipient's actions.
5.  Mention any prior attempts to resolve the issue (e.g., support tickets, emails).
6.  State the demands clearly, specifying a timeframe for compliance (e.g., "within 15 days").
    a. [Demand 1]
    b. [Demand 2]
7.  Describe the legal consequences of non-compliance.
8.  Include a "without prejudice" clause to reserve your client's rights.
9.  Specify the address for reply and future correspondence.

---

**User Provided Information:**

Client Name: {client_name}
Document Type: {document_type}
Relevant Jurisdiction: {relevant_jurisdiction}
Case Details: {case_details}

---

Begin the generated draft now. Ensure all text is properly formatted with newlines."""

FIRM_HEADER_TEMPLATE = """Email Id: {email}
Address: {address}
*{practice_areas}*"""

TRANSLATE_TEMPLATE = """Translate the following text to {target_language}. Return only the translation.

{text}"""

SUMMARY_SYSTEM_PROMPT = """You are an expert multilingual assistant working for a law firm's intake desk.
You summarize voice transcripts from prospective clients so a lawyer can triage them quickly."""

SUMMARY_TEMPLATE = """The user is a potential lead for a law firm.
The transcript is in {language}.
Please provide a concise summary of the user's issue in English.

Transcript:
{transcript}

Summary:"""
