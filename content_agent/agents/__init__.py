"""
LangGraph agents package.

Core workflow components:
- state.py:     WorkflowState TypedDict and state helpers
- graph.py:     Transition table, graph wiring, checkpointer
- driver.py:    Run / resume sessions as snapshot streams
- approval.py:  Approval gate for human-in-the-loop decisions
- nodes/:       All graph node implementations organized by phase
"""
