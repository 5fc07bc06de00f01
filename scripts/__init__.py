"""
Utility Scripts.

- setup_supabase.py: SQL for the content_library and webhook_configs tables

Run scripts with: python -m scripts.<script_name>
"""
