"""
Agents used by the content generation runtime.

- ContentAgent: classify -> resolve schema -> build request -> invoke with
  retry -> validate -> (stateful path) extend the session transcript.
"""
