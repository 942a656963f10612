
import sys
import os
import traceback

# Add project root to path
sys.path.append(os.getcwd())

print("Starting schema verification...")

try:
    from app import schemas
    print("Schemas package imported successfully.")
    
    # Try instantiating a few to check for runtime errors in definitions
    from pydantic import ValidationError
    
    try:
        layout = schemas.TheaterLayout(main_floor={"rows": 5, "seats_per_row": 10, "aisle_positions": [5, 3, 5]})
        print(f"TheaterLayout schema valid: {layout}")
    except ValidationError as e:
        print(f"TheaterLayout validation failed: {e}")

    try:
        schemas.BookingCreate(
            event_id="5f2b8e4a-6d1c-4a7b-9c3e-1f0a2b3c4d5e",
            selected_seats=[{"row": "A", "seat_number": 1}],
        )
        print("BookingCreate schema valid.")
    except ValidationError as e:
        print(f"BookingCreate validation failed: {e}")

    print("SUCCESS: Schemas verified.")

except Exception:
    print("FAILURE: Schema verification failed.")
    traceback.print_exc()
    sys.exit(1)
