"""
TCR Tasks TUI - terminal task list with a test && commit || revert action.

Architecture:
- machine.py: pure interaction state machine and key routing
- views/: Textual screen/widget components
- app.py: Main application entry point, runs effects and owns the state

Persistence lives in scripts/taskstore.py and external commands in
scripts/tcr.py; neither depends on Textual.
"""
