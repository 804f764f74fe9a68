import argparse
import json
import os
import sys
import time
import requests
import google.generativeai as genai
import google.generativeai.types as genai_types

# Add project root to Python path to allow importing app modules
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

try:
    from app.core.config import settings
    from app.db.session import SessionLocal
    from app.crud import crud_prompt
except ImportError as e:
    print(f"Error importing app modules: {e}")
    print("Make sure the script is run from the project root or the PYTHONPATH is set correctly.")
    sys.exit(1)

# --- Configuration ---
GEMINI_API_KEY = settings.GEMINI_API_KEY
API_BASE_URL = "http://localhost:8000" # Assuming default FastAPI port
PROMPT_ENDPOINT = f"{API_BASE_URL}{settings.API_V1_STR}/prompts"
MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 5
DEFAULT_BATCH_SIZE = 5 # Number of prompts to request from Gemini per call
DIFFICULTIES = ("easy", "medium", "hard")

# --- Gemini Model Setup ---
def configure_gemini():
    if not GEMINI_API_KEY or GEMINI_API_KEY == "YOUR_GEMINI_API_KEY_HERE":
        print("Error: GEMINI_API_KEY is not configured in .env or is set to the placeholder.")
        print("Please set your Gemini API Key in the .env file (e.g., GEMINI_API_KEY='your_actual_key').")
        sys.exit(1)
    try:
        genai.configure(api_key=GEMINI_API_KEY)
        model = genai.GenerativeModel('gemini-2.5-flash')
        print("Gemini client configured successfully.")
        return model
    except Exception as e:
        print(f"Error configuring Gemini client: {e}")
        sys.exit(1)

# --- API Interaction ---
def add_prompt_api(text, category, difficulty):
    payload = {"text": text, "category": category, "difficulty": difficulty}
    for attempt in range(MAX_RETRIES):
        try:
            response = requests.post(PROMPT_ENDPOINT, json=payload)
            if response.status_code == 409:
                print(f"Already in catalog: {text[:40]}...")
                return None
            if response.status_code == 422:
                print(f"Validation error: {response.text}")
                return None
            response.raise_for_status()
            print(f"Successfully added: {text[:40]}...")
            return response.json()
        except requests.exceptions.HTTPError as e:
            print(f"HTTP error adding prompt (attempt {attempt + 1}/{MAX_RETRIES}): {e}")
        except requests.exceptions.RequestException as e:
            print(f"Request error adding prompt (attempt {attempt + 1}/{MAX_RETRIES}): {e}")

        if attempt < MAX_RETRIES - 1:
            time.sleep(RETRY_DELAY_SECONDS)
    print("Max retries reached. Failed to add prompt.")
    return None


single_prompt_schema = genai_types.Schema(
    type=genai_types.Type.OBJECT,
    properties={
        'text': genai_types.Schema(type=genai_types.Type.STRING, description="A short scene with a clear before and after, drawable in two sketches."),
        'category': genai_types.Schema(type=genai_types.Type.STRING, description="One lowercase word, e.g. 'animals', 'sports', 'vehicles'."),
        'difficulty': genai_types.Schema(type=genai_types.Type.STRING, enum=list(DIFFICULTIES), description="How hard the scene is to draw."),
    },
    required=['text', 'category', 'difficulty']
)
prompt_list_schema = genai_types.Schema(
    type=genai_types.Type.ARRAY,
    items=single_prompt_schema,
    description="A list of drawing prompts."
)

def generate_prompts_with_gemini(model, num_items_to_generate: int):
    print(f"Generating {num_items_to_generate} prompt(s) with Gemini using response schema...")
    response = None
    try:
        request_text = f"""
        Generate {num_items_to_generate} unique drawing prompts for a party game.
        Each player draws two quick sketches for the prompt: the first scene and the
        moment right after it. The two sketches are later animated into a short video,
        so every prompt needs visible action or change, e.g. "A bird flying and catching on fire".

        For each prompt, provide:
        - "text": the scene, at most 12 words.
        - "category": one lowercase word.
        - "difficulty": "easy", "medium" or "hard".

        The output must be a JSON array, where each element is an object matching the defined schema.
        """

        generation_config = genai_types.GenerationConfig(
            response_mime_type="application/json",
            response_schema=prompt_list_schema,
        )
        response = model.generate_content(request_text, generation_config=generation_config)

        cleaned_response_text = response.text.strip()
        if cleaned_response_text.startswith("```json"):
            cleaned_response_text = cleaned_response_text[7:]
        if cleaned_response_text.endswith("```"):
            cleaned_response_text = cleaned_response_text[:-3]

        items = json.loads(cleaned_response_text)
        if not isinstance(items, list):
            print("Error: Gemini response is not a list as expected by the schema.")
            print(f"Raw response was: {response.text}")
            return None

        validated_items = []
        for item in items:
            if not all(k in item for k in ["text", "category", "difficulty"]):
                print(f"Error: Gemini response item missing one or more required keys: {item}")
                continue
            if item["difficulty"] not in DIFFICULTIES:
                print(f"Error: Gemini response item has unknown difficulty: {item}")
                continue
            validated_items.append(item)

        print(f"Gemini generated {len(validated_items)} valid item(s) (requested {num_items_to_generate}).")
        return validated_items

    except json.JSONDecodeError as e:
        print(f"Error decoding JSON from Gemini response: {e}")
        if response is not None:
            print(f"Raw response text: {response.text}")
        return None
    except Exception as e:
        print(f"Error during Gemini prompt generation: {e}")
        if response is not None and hasattr(response, 'prompt_feedback'):
            print(f"Prompt feedback: {response.prompt_feedback}")
        return None

def check_for_duplicate_db(text):
    db = None
    try:
        db = SessionLocal()
        return crud_prompt.get_prompt_by_text(db, text) is not None
    except Exception as e:
        print(f"Database error during duplicate check: {e}")
        return True # Assume duplicate or error to be safe
    finally:
        if db:
            db.close()

# --- Main Logic ---
def main():
    parser = argparse.ArgumentParser(description="Fill the drawing prompt catalog using Gemini.")
    parser.add_argument(
        "-n", "--num_prompts", type=int, default=20,
        help="Number of unique prompts to generate and add."
    )
    parser.add_argument(
        "-b", "--batch_size", type=int, default=DEFAULT_BATCH_SIZE,
        help=f"Number of prompts to request from Gemini in a single API call (default: {DEFAULT_BATCH_SIZE})."
    )
    args = parser.parse_args()

    print(f"Starting prompt generation script. Goal: {args.num_prompts} unique prompts.")
    gemini_model = configure_gemini()

    added_count = 0
    gemini_api_calls = 0
    max_api_calls = (args.num_prompts * 3) // args.batch_size + 5

    while added_count < args.num_prompts and gemini_api_calls < max_api_calls:
        gemini_api_calls += 1
        print(f"\n--- Gemini API Call Attempt {gemini_api_calls}/{max_api_calls} ---")

        num_to_request = min(args.batch_size, args.num_prompts - added_count)
        items = generate_prompts_with_gemini(gemini_model, num_to_request)
        if not items:
            print("Failed to generate prompts from Gemini or list was empty/invalid. Retrying after delay...")
            time.sleep(RETRY_DELAY_SECONDS)
            continue

        for item in items:
            if added_count >= args.num_prompts:
                break
            if check_for_duplicate_db(item["text"]):
                print(f"Duplicate found in DB for: {item['text'][:40]}... Skipping.")
                continue
            if add_prompt_api(item["text"], item["category"], item["difficulty"]):
                added_count += 1
                print(f"Added prompt {added_count}/{args.num_prompts}.")
            time.sleep(1)

        time.sleep(2) # Delay before next big API call to Gemini

    print(f"\n--- Script Finished ---")
    print(f"Total Gemini API calls made: {gemini_api_calls}")
    print(f"Successfully added {added_count} unique prompts out of {args.num_prompts} requested.")

if __name__ == "__main__":
    main()
