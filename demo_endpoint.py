"""
Quick demo script to run the Job Ledger API locally.

Set STORE_BACKEND=memory to try the job -> transaction flow without Supabase
(a valid Supabase JWT is still required on every route except /health).
"""

import uvicorn

if __name__ == "__main__":
    print("=" * 60)
    print("Starting Job Ledger Backend Demo")
    print("=" * 60)
    print()
    print("API Endpoints:")
    print("   - Health Check:    GET   http://localhost:8000/health")
    print("   - Jobs:            POST  http://localhost:8000/jobs")
    print("   - Complete a job:  PATCH http://localhost:8000/jobs/{job_id}")
    print("   - Job expenses:    POST  http://localhost:8000/expenses")
    print("   - Ledger:          GET   http://localhost:8000/transactions")
    print("   - Summary:         GET   http://localhost:8000/reports/summary")
    print("   - API Docs:              http://localhost:8000/docs")
    print()
    print("Authentication:")
    print("   All endpoints (except /health) require:")
    print("   Authorization: Bearer <token>")
    print()
    print("Test with curl:")
    print('   curl -X PATCH "http://localhost:8000/jobs/<job_id>" \\')
    print('     -H "Authorization: Bearer <token>" \\')
    print('     -H "Content-Type: application/json" \\')
    print('     -d \'{"status": "completed"}\'')
    print()
    print("=" * 60)
    print("Starting server on http://localhost:8000")
    print("Press Ctrl+C to stop")
    print("=" * 60)
    print()

    uvicorn.run(
        "jobledger.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
