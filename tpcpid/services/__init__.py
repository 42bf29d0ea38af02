"""
Services for the LF TPC PID workflow.

Each service has a single responsibility and no orchestration logic.
"""
