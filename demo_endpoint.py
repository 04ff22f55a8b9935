"""
Quick demo script to run the Posture Coach API locally.

This script starts a local server and shows how to make requests to the endpoints.
"""

import uvicorn

if __name__ == "__main__":
    print("=" * 60)
    print("Starting Posture Coach Backend Demo")
    print("=" * 60)
    print()
    print("📌 API Endpoints:")
    print("   - Health Check:        GET  http://localhost:8000/health")
    print("   - Recommend Exercises: POST http://localhost:8000/exercises/recommend")
    print("   - Recommend Products:  POST http://localhost:8000/products/recommend")
    print("   - Browse Exercises:    GET  http://localhost:8000/exercises?category=stretching")
    print("   - Browse Products:     GET  http://localhost:8000/products?search=tapis")
    print("   - API Docs:                 http://localhost:8000/docs")
    print()
    print("📝 Test with curl:")
    print('   curl -X POST "http://localhost:8000/exercises/recommend" \\')
    print('     -H "Content-Type: application/json" \\')
    print('     -d \'{"questionnaire": {"goals": ["posture"], "painAreas": ["lower_back"], "fitnessLevel": "beginner"}}\'')
    print()
    print('   curl -X POST "http://localhost:8000/products/recommend" \\')
    print('     -H "Content-Type: application/json" \\')
    print('     -d \'{"exerciseIds": ["Plank", "Cat Stretch"]}\'')
    print()
    print("=" * 60)
    print("Starting server on http://localhost:8000")
    print("Press Ctrl+C to stop")
    print("=" * 60)
    print()

    uvicorn.run(
        "posture_coach.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
