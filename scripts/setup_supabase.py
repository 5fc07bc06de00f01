#!/usr/bin/env python3
"""Supabase database setup script for ContentLab.

This script outputs the SQL needed to create the ContentLab tables in Supabase.
Copy the SQL output and run it in the Supabase SQL Editor.

Usage:
    # Print all SQL to console
    python scripts/setup_supabase.py

    # Print SQL and save to file
    python scripts/setup_supabase.py --output setup.sql

    # Verify tables exist
    python scripts/setup_supabase.py --verify

Tables Created:
    - content_library: Generated content, one row per content string
    - webhook_configs: Per-type n8n webhook URL overrides
    - semrush_keywords: Stored SEMrush keyword results
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import datetime

# =============================================================================
# SQL Schema Definitions
# =============================================================================

SCHEMA_SQL = """
-- =============================================================================
-- ContentLab Database Schema for Supabase
-- =============================================================================
-- Generated: {generated_at}
--
-- Instructions:
-- 1. Open your Supabase project dashboard
-- 2. Go to SQL Editor
-- 3. Paste this entire script
-- 4. Click "Run" to execute
-- =============================================================================

CREATE EXTENSION IF NOT EXISTS "uuid-ossp";

-- =============================================================================
-- Table: content_library
-- =============================================================================
-- Generated content. A saved bundle becomes one row per pillar, support,
-- meta, social or email string.
-- =============================================================================

CREATE TABLE IF NOT EXISTS content_library (
    id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),

    title TEXT,
    content TEXT NOT NULL,
    content_type TEXT NOT NULL DEFAULT 'misc',
    topic_area TEXT,
    keywords TEXT[] DEFAULT '{{}}',

    is_saved BOOLEAN DEFAULT true,
    is_selected BOOLEAN DEFAULT false,

    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW(),

    CONSTRAINT content_library_content_not_empty CHECK (content <> ''),
    CONSTRAINT content_library_content_type_valid CHECK (
        content_type IN ('pillar', 'support', 'meta', 'social', 'email', 'misc')
    )
);

CREATE INDEX IF NOT EXISTS idx_content_library_content_type ON content_library(content_type);
CREATE INDEX IF NOT EXISTS idx_content_library_topic_area ON content_library(topic_area);
CREATE INDEX IF NOT EXISTS idx_content_library_created_at ON content_library(created_at DESC);
CREATE INDEX IF NOT EXISTS idx_content_library_keywords ON content_library USING GIN (keywords);

COMMENT ON TABLE content_library IS 'Generated marketing content stored by ContentLab';
COMMENT ON COLUMN content_library.content_type IS 'pillar, support, meta, social, email or misc';
COMMENT ON COLUMN content_library.topic_area IS 'Topic area of the bundle the row came from';
COMMENT ON COLUMN content_library.is_saved IS 'Saved by the user rather than auto-stored';


-- =============================================================================
-- Table: webhook_configs
-- =============================================================================
-- n8n webhook URLs by workflow type. The newest active row per type
-- overrides the URL from the environment.
-- =============================================================================

CREATE TABLE IF NOT EXISTS webhook_configs (
    id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),

    type TEXT,
    url TEXT,

    -- Legacy column names, still read as a fallback
    webhook_type TEXT NOT NULL,
    webhook_url TEXT NOT NULL,

    is_active BOOLEAN DEFAULT true,
    is_global BOOLEAN DEFAULT false,

    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_webhook_configs_type ON webhook_configs(type);
CREATE INDEX IF NOT EXISTS idx_webhook_configs_is_active ON webhook_configs(is_active);
CREATE INDEX IF NOT EXISTS idx_webhook_configs_created_at ON webhook_configs(created_at DESC);

COMMENT ON TABLE webhook_configs IS 'n8n webhook URL overrides per workflow type';
COMMENT ON COLUMN webhook_configs.type IS 'keywords, content, custom-keywords or content-adjustment';


-- =============================================================================
-- Table: semrush_keywords
-- =============================================================================
-- Stored SEMrush results. Rows are grouped by search cache key and topic
-- area, and a group is replaced whenever fresh results are fetched.
-- =============================================================================

CREATE TABLE IF NOT EXISTS semrush_keywords (
    id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),

    cache_key TEXT NOT NULL,
    topic_area TEXT DEFAULT 'general',
    domain TEXT,

    keyword TEXT NOT NULL,
    volume INTEGER DEFAULT 0,
    difficulty INTEGER DEFAULT 50,
    cpc NUMERIC(10, 2) DEFAULT 0,
    trend TEXT,

    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW(),

    CONSTRAINT semrush_keywords_trend_valid CHECK (
        trend IS NULL OR trend IN ('up', 'neutral', 'down')
    )
);

CREATE INDEX IF NOT EXISTS idx_semrush_keywords_group ON semrush_keywords(cache_key, topic_area);
CREATE INDEX IF NOT EXISTS idx_semrush_keywords_created_at ON semrush_keywords(created_at DESC);

COMMENT ON TABLE semrush_keywords IS 'Stored SEMrush keyword results by search';
COMMENT ON COLUMN semrush_keywords.cache_key IS 'phrase-related-<keyword>, domain-<domain> or general-search';


-- =============================================================================
-- Function: Update updated_at timestamp
-- =============================================================================

CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = NOW();
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;

DROP TRIGGER IF EXISTS update_content_library_updated_at ON content_library;
CREATE TRIGGER update_content_library_updated_at
    BEFORE UPDATE ON content_library
    FOR EACH ROW
    EXECUTE FUNCTION update_updated_at_column();

DROP TRIGGER IF EXISTS update_webhook_configs_updated_at ON webhook_configs;
CREATE TRIGGER update_webhook_configs_updated_at
    BEFORE UPDATE ON webhook_configs
    FOR EACH ROW
    EXECUTE FUNCTION update_updated_at_column();

DROP TRIGGER IF EXISTS update_semrush_keywords_updated_at ON semrush_keywords;
CREATE TRIGGER update_semrush_keywords_updated_at
    BEFORE UPDATE ON semrush_keywords
    FOR EACH ROW
    EXECUTE FUNCTION update_updated_at_column();
"""


# =============================================================================
# Drop Tables SQL (use with caution!)
# =============================================================================

DROP_TABLES_SQL = """
-- =============================================================================
-- DROP ALL TABLES (USE WITH EXTREME CAUTION!)
-- =============================================================================
-- This will delete ALL data. Only use for complete reset during development.
-- =============================================================================

DROP TABLE IF EXISTS semrush_keywords CASCADE;
DROP TABLE IF EXISTS webhook_configs CASCADE;
DROP TABLE IF EXISTS content_library CASCADE;

DROP FUNCTION IF EXISTS update_updated_at_column() CASCADE;
"""

REQUIRED_TABLES = ["content_library", "webhook_configs", "semrush_keywords"]


# =============================================================================
# Verification Functions
# =============================================================================

async def verify_tables(supabase=None) -> dict:
    """Verify that all required tables exist in Supabase.

    Args:
        supabase: Supabase client. Created from settings if not provided.

    Returns:
        Dictionary with verification results.
    """
    try:
        if supabase is None:
            from contentlab.api.dependencies import get_supabase

            supabase = get_supabase()

        results = {
            'success': True,
            'tables': {},
            'missing': [],
            'errors': [],
        }

        for table in REQUIRED_TABLES:
            try:
                response = supabase.table(table).select('id').limit(1).execute()
                results['tables'][table] = {
                    'exists': True,
                    'accessible': True,
                    'row_count': len(response.data) if response.data else 0,
                }
            except Exception as e:
                error_str = str(e)
                if 'does not exist' in error_str.lower() or 'relation' in error_str.lower():
                    results['tables'][table] = {
                        'exists': False,
                        'accessible': False,
                    }
                    results['missing'].append(table)
                    results['success'] = False
                else:
                    results['tables'][table] = {
                        'exists': 'unknown',
                        'accessible': False,
                        'error': error_str[:100],
                    }
                    results['errors'].append(f"{table}: {error_str[:100]}")
                    results['success'] = False

        return results

    except Exception as e:
        return {
            'success': False,
            'error': str(e),
        }


def print_verification_results(results: dict) -> None:
    """Print verification results in a formatted way."""
    print("\n" + "=" * 70)
    print("Supabase Table Verification Results")
    print("=" * 70)

    if 'error' in results:
        print(f"\nError: {results['error']}")
        return

    print(f"\nOverall Status: {'PASS' if results['success'] else 'FAIL'}")
    print("-" * 70)

    print("\nTable Status:")
    for table, info in results.get('tables', {}).items():
        status = "OK" if info.get('exists') is True and info.get('accessible') else "MISSING"
        icon = "[+]" if status == "OK" else "[-]"
        print(f"  {icon} {table}: {status}")
        if info.get('error'):
            print(f"      Error: {info['error']}")

    if results.get('missing'):
        print(f"\nMissing Tables: {', '.join(results['missing'])}")
        print("\nRun this script without --verify to get the SQL to create missing tables.")

    if results.get('errors'):
        print("\nErrors:")
        for error in results['errors']:
            print(f"  - {error}")

    print("\n" + "=" * 70)


# =============================================================================
# Main Functions
# =============================================================================

def get_setup_sql() -> str:
    """Get the complete setup SQL with timestamp."""
    return SCHEMA_SQL.format(
        generated_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    )


def get_drop_sql() -> str:
    """Get the SQL to drop all tables (use with caution!)."""
    return DROP_TABLES_SQL


def get_sql(sql_type: str = 'setup') -> str:
    """Return setup or drop SQL."""
    if sql_type == 'setup':
        return get_setup_sql()
    if sql_type == 'drop':
        return get_drop_sql()
    raise ValueError(f"Unknown SQL type: {sql_type}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the setup script."""
    parser = argparse.ArgumentParser(
        description='Generate Supabase setup SQL for ContentLab',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Print setup SQL to console
    python scripts/setup_supabase.py

    # Save setup SQL to file
    python scripts/setup_supabase.py --output setup.sql

    # Verify tables exist in Supabase
    python scripts/setup_supabase.py --verify

    # Print drop SQL (use with caution!)
    python scripts/setup_supabase.py --type drop
        """
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Save SQL to file instead of printing'
    )

    parser.add_argument(
        '--type', '-t',
        type=str,
        choices=['setup', 'drop'],
        default='setup',
        help='Type of SQL to generate (default: setup)'
    )

    parser.add_argument(
        '--verify', '-v',
        action='store_true',
        help='Verify that tables exist in Supabase'
    )

    args = parser.parse_args(argv)

    if args.verify:
        results = asyncio.run(verify_tables())
        print_verification_results(results)
        return 0 if results.get('success') else 1

    sql = get_sql(args.type)
    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(sql)
        print(f"SQL saved to: {args.output}")
    else:
        if args.type == 'drop':
            print("\n" + "!" * 70)
            print("WARNING: This will DELETE ALL DATA!")
            print("!" * 70 + "\n")
        print(sql)
    return 0


if __name__ == '__main__':
    sys.exit(main())
