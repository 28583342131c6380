"""
Prompt templates for every model-backed stage.
Kept in one place so wording changes never touch pipeline logic.
"""

CORPUS_NAME = "the lecture video library"

EXPAND_QUERY_PROMPT = """You are helping search through lecture videos. The user searched for: "{query}"

If this query is vague or could be improved, expand it to include related terms and concepts that would help find relevant videos.
If the query is already specific and clear, return it as-is.

Examples:
- "jobs" → "how to get a software engineering job, job search strategies, interview preparation, resume tips, networking for employment"
- "CSS" → "CSS styling, CSS flexbox, CSS grid, CSS layouts, CSS properties"
- "how to network effectively" → "how to network effectively" (already specific)

Return ONLY the expanded query text, nothing else."""

SUMMARY_PROMPT = """User searched for: "{query}"

Here are relevant video segments from {corpus}:
{context}

Provide a brief, helpful summary (under 100 words) highlighting:
- The most relevant videos found
- What topics they cover
- When in the videos to find this information

Be conversational and encouraging."""

RELATED_TOPICS_PROMPT = """Given this search query about the lecture material: "{query}"

Generate 4-5 related search queries that someone learning from {corpus} might also be interested in.

Each suggestion should:
- Be specific and actionable
- Build on or complement the original query
- Be relevant to the subject of the lectures
- Have a brief reason why it's related

Example:
Query: "JavaScript arrays"
Related:
- "JavaScript array methods" - "Learn map, filter, reduce"
- "JavaScript objects" - "Often used with arrays"
- "JavaScript loops" - "Common way to iterate arrays\""""

LEARNING_PATH_PROMPT = """Create a personalized learning path for this goal: "{goal}"

Available videos from {corpus}:
{video_context}

Create a structured learning path that:
1. Sequences 5-7 videos in a logical learning order
2. Explains why each video is included (1-2 sentences)
3. Lists 3-5 key topics to focus on in each video
4. Estimates total time needed
5. Is encouraging and practical for a beginner

Only use videos from the list above, and copy each videoId exactly.
Return a JSON object with: title, description, estimatedTime, and videos array."""

CHAT_SYSTEM_WITH_CONTEXT = """You are a helpful assistant that answers questions about {corpus}.

Here is context from the video transcripts:
{context}

Use this context to answer questions accurately. Reference specific videos and timestamps when relevant.

Be conversational, helpful, and encouraging. If you don't know something, suggest what the user should search for."""

CHAT_SYSTEM_NO_CONTEXT = """You are a helpful assistant that answers questions about {corpus}.

Help users find information in the lecture videos.

Be conversational, helpful, and encouraging. If you don't know something, suggest what the user should search for."""
