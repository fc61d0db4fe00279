"""
prompt templates and response schemas for the research collaborator.
"""

import json
from typing import List


LABELS = ["hot", "classic", "niche"]

_KEYWORD_ITEM = {
    "type": "OBJECT",
    "properties": {
        "keyword": {"type": "STRING"},
        "label": {"type": "STRING", "enum": LABELS},
    },
    "required": ["keyword"],
}

TREE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "keyword": {"type": "STRING", "description": "A concise academic keyword or phrase."},
        "children": {
            "type": "ARRAY",
            "description": "An array of child keywords. Should contain around 10 items.",
            "items": _KEYWORD_ITEM,
        },
    },
    "required": ["keyword", "children"],
}

EXPANSION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "expansions": {"type": "ARRAY", "items": _KEYWORD_ITEM},
    },
    "required": ["expansions"],
}

NETWORK_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "connections": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "from": {"type": "STRING", "description": "One of the provided keywords."},
                    "to": {"type": "STRING", "description": "Another one of the provided keywords."},
                    "label": {"type": "STRING", "description": "A brief description of the relationship."},
                },
                "required": ["from", "to"],
            },
        },
    },
    "required": ["connections"],
}


def tree_prompt(root_keyword: str) -> str:
    return (
        f'Generate a starting research tree for the academic topic "{root_keyword}". '
        "If the topic is in Chinese, generate a tree in Chinese. "
        "The root should be the keyword itself. "
        "Create around 10 main branches from this root, each with a relevant sub-keyword. "
        "Include a mix of closely related sub-topics and more distinct or tangential ones "
        "to encourage broad exploration. "
        "Assign a label ('hot', 'classic', or 'niche') to each generated sub-keyword."
    )


def expansion_prompt(parent_keyword: str) -> str:
    return (
        f'The user wants to expand their research tree from the keyword "{parent_keyword}". '
        "If the keyword is in Chinese, generate Chinese results. "
        "Generate around 10 new, more specific sub-keywords related to it. "
        "Include a diverse range of topics, some closely related and some more tangential. "
        "For each, provide a label ('hot', 'classic', or 'niche')."
    )


def network_prompt(keywords: List[str]) -> str:
    return (
        "Given the following list of academic keywords, identify the direct relationships "
        "between them. If they are in Chinese, provide Chinese relationships. "
        "Represent these relationships as a list of connections. "
        "Each connection is an object with 'from' and 'to' properties, using the exact "
        "keyword strings from the input list. Also provide a brief 'label' for the "
        "relationship (e.g., 'subfield of', 'intersects with', 'enables'). "
        "Only include connections between the provided keywords. "
        f"Keywords: {json.dumps(keywords, ensure_ascii=False)}"
    )


LITERATURE_SYSTEM = (
    "You are a meticulous digital archivist and expert academic librarian. "
    "Your most critical and ONLY important task is to provide REAL, VERIFIABLE "
    "academic literature. Any fake or inaccessible link is a complete failure of your task."
)


def literature_prompt(keyword: str) -> str:
    return f"""The user's research topic is: "{keyword}"

**CRITICAL INSTRUCTIONS FOR CHINESE TOPICS:**
If the topic "{keyword}" is in Chinese, you MUST adhere to the following rules without exception:
1. **Source Limitation:** You are ONLY allowed to provide papers from "Baidu Scholar" (百度学术) and the "National Centre for Philosophy and Social Sciences Documentation" (国家哲学社会科学文献中心).
2. **URL Verification:** The final URL for each paper MUST point to one of these two domains: `xueshu.baidu.com` or `ncpssd.org`. No other domain is acceptable for Chinese literature.

**Mandatory Two-Step Verification Process for ALL topics:**
1. **Step 1 (Find):** Use your search tool to find 8 relevant academic papers on the topic.
2. **Step 2 (Verify):** For EACH paper you find, take the exact title and perform a NEW search to confirm its existence and find its canonical URL on an official academic site.

**Output Format:**
Compile the verified information into a single JSON object with a single key "papers", an array of paper objects. Each paper object must contain:
- "title": The full title of the paper.
- "authors": An array of author names.
- "year": The publication year as a number.
- "abstract": A concise summary of the paper's key findings.
- "citations": The number of citations (if available).
- "url": The DIRECT and VERIFIABLE URL to the paper's landing page.

**ZERO-TOLERANCE POLICY:**
- DO NOT INVENT PAPERS OR URLS. If you cannot verify a paper, DO NOT include it.
- It is better to return fewer, fully verified papers than a list with any unverified entries.
- The final output should be ONLY the JSON object, enclosed in a ```json ... ``` markdown block."""
