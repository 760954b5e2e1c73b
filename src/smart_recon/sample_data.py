"""Bundled sample statement and ledger used by the ``demo`` command."""

SAMPLE_STATEMENT_CSV = """id,date,description,amount,type
S-001,2024-03-01,Coffee Shop,-12.50,debit
S-002,2024-03-02,AMZN MKTP ZA*2K4,-450.00,debit
S-003,2024-03-04,Card Sale Batch 1,3000.00,credit
S-004,2024-03-04,Card Sale Batch 2,3500.00,credit
S-005,2024-03-05,Card Sale Batch 3,3497.00,credit
S-006,2024-03-06,ENGEN FUEL RANDBURG,-820.35,debit
S-007,2024-03-07,Monthly Service Fee,-65.00,debit
S-008,2024-03-08,TELKOM INTERNET,-899.00,debit
S-009,2024-03-12,EFT Payment Acme Supplies,-1200.00,debit
"""

SAMPLE_LEDGER_CSV = """id,date,description,amount,type
L-001,2024-03-01,Coffee Shop,12.50,debit
L-002,2024-03-03,Amazon Marketplace,450.00,debit
L-003,2024-03-05,Card sales week 10,10000.00,credit
L-004,2024-03-06,Engen Fuel Randburg,820.35,debit
L-005,2024-03-08,Telkom Internet March,899.00,debit
L-006,2024-03-15,Office Rent March,15000.00,debit
"""
