import sqlite3
from pathlib import Path

db_path = Path("db/packtrack.db")
try:
    con = sqlite3.connect(db_path)
    cursor = con.cursor()
    cursor.execute("PRAGMA table_info(production_order)")
    print("Columns in production_order:")
    for col in cursor.fetchall():
        print(col)

    cursor.execute(
        """
        SELECT m.dossier_reference, m.sap_code, m.planned_tonnage,
               COALESCE(SUM(o.tonnage), 0) AS produced
        FROM master_program m
        LEFT JOIN production_order o
          ON (TRIM(o.dossier_reference) <> '' AND UPPER(TRIM(o.dossier_reference)) = UPPER(TRIM(m.dossier_reference)))
          OR (TRIM(o.sap_code) <> '' AND UPPER(TRIM(o.sap_code)) = UPPER(TRIM(m.sap_code)))
        GROUP BY m.program_id
        ORDER BY m.program_id
        """
    )
    print("\nDossier progress:")
    for dossier, sap, planned, produced in cursor.fetchall():
        print(f"{dossier or '-':<12} {sap or '-':<12} {produced:>10.2f} / {planned:>10.2f} T")

    con.close()

except Exception as e:
    print("Error:", e)
