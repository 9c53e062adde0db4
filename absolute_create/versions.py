"""Pinned package versions written into generated manifests.

Every version listed in the catalog, the driver profiles, and the ORM and
tooling dependency sets is read from ``VERSIONS``.  When resolve-latest mode
is active these pins are the fallback for any registry lookup that fails.
"""

from __future__ import annotations

VERSIONS: dict[str, str] = {
    # Core runtime
    "@absolutejs/absolute": "0.16.10",
    "@absolutejs/auth": "0.22.0",
    "@elysiajs/static": "1.4.7",
    "elysia": "1.4.25",
    "elysia-scoped-state": "0.1.1",
    # Optional plugins
    "@elysiajs/cors": "1.4.1",
    "@elysiajs/swagger": "1.3.1",
    "elysia-rate-limit": "4.5.0",
    # Build
    "typescript": "5.9.3",
    # Tailwind
    "@tailwindcss/cli": "4.2.0",
    "autoprefixer": "10.4.24",
    "postcss": "8.5.6",
    "tailwindcss": "4.2.0",
    # Frontends
    "@types/react": "19.2.14",
    "react": "19.2.4",
    "react-dom": "19.2.4",
    "prettier-plugin-svelte": "3.5.0",
    "svelte": "5.53.0",
    "vue": "3.5.28",
    # Code quality
    "@biomejs/biome": "2.2.0",
    "@eslint/js": "10.0.1",
    "eslint": "10.0.0",
    "globals": "17.3.0",
    "prettier": "3.8.1",
    "typescript-eslint": "8.56.0",
    # ORMs
    "@prisma/client": "6.2.0",
    "drizzle-kit": "0.31.1",
    "drizzle-orm": "0.45.1",
    "prisma": "6.2.0",
    # Managed hosts
    "@libsql/client": "0.17.0",
    "@neondatabase/serverless": "1.0.2",
    "@planetscale/database": "1.19.0",
    # Drivers
    "@types/mssql": "9.1.9",
    "@types/pg": "8.16.0",
    "gel": "2.2.0",
    "mongodb": "7.1.0",
    "mssql": "12.2.0",
    "mysql2": "3.17.3",
    "pg": "8.18.0",
}


def pinned(package: str) -> str:
    """Return the pinned version for *package*.

    Raises:
        KeyError: If the package has no pin.
    """
    return VERSIONS[package]
