"""
Indian geography vocabularies used by the extractors.

Address indicators (street/locality keywords, states, cities), the GST
state-code table and the enumerated state list printed on society
registration certificates.
"""

import re

# ── Address keywords (lowercase substrings) ─────────────────────────
ADDRESS_KEYWORDS = (
    # street / road
    "street", "road", "lane", "gali", "marg", "path", "chowk", "circle",
    # area / locality
    "nagar", "colony", "village", "mohalla", "sector", "block", "ward", "area",
    "locality", "vihar", "enclave", "park", "garden", "bagh", "puram", "pur",
    "puri", "garh", "ganj", "gunj", "pet", "peta", "wadi", "wada", "gaon",
    "khurd", "kalan", "khas",
    # building
    "house", "flat", "apartment", "floor", "building", "tower", "complex",
    "society", "plot", "shop", "office",
    # administrative divisions
    "tehsil", "taluka", "mandal", "district", "dist", "state", "post", "p.o",
    "p.o.", "ps", "p.s", "thana",
    # prefixes
    "s/o", "c/o", "d/o", "w/o", "h/no", "h.no", "house no", "vill", "tq", "tal",
)

STATE_NAMES = (
    "andhra pradesh", "arunachal pradesh", "assam", "bihar", "chhattisgarh",
    "goa", "gujarat", "haryana", "himachal pradesh", "jharkhand", "karnataka",
    "kerala", "madhya pradesh", "maharashtra", "manipur", "meghalaya",
    "mizoram", "nagaland", "odisha", "punjab", "rajasthan", "sikkim",
    "tamil nadu", "telangana", "tripura", "uttar pradesh", "uttarakhand",
    "west bengal", "delhi", "chandigarh", "puducherry", "ladakh", "jammu",
    "kashmir", "andaman", "nicobar", "lakshadweep", "dadra", "nagar haveli",
    "daman", "diu",
)

# Two-letter state codes, matched as whole words only
STATE_ABBREVIATIONS = (
    "ap", "ar", "as", "br", "cg", "ga", "gj", "hr", "hp", "jh", "ka", "kl",
    "mp", "mh", "mn", "ml", "mz", "nl", "od", "pb", "rj", "sk", "tn", "ts",
    "tr", "up", "uk", "wb", "dl", "ch", "py", "jk", "an", "ld", "dn", "dd",
)

CITY_NAMES = (
    "mumbai", "delhi", "bangalore", "bengaluru", "hyderabad", "ahmedabad",
    "chennai", "kolkata", "surat", "pune", "jaipur", "lucknow", "kanpur",
    "nagpur", "indore", "thane", "bhopal", "visakhapatnam", "vizag", "patna",
    "vadodara", "ghaziabad", "ludhiana", "agra", "nashik", "faridabad",
    "meerut", "rajkot", "varanasi", "srinagar", "aurangabad", "dhanbad",
    "amritsar", "allahabad", "prayagraj", "ranchi", "howrah", "coimbatore",
    "jabalpur", "gwalior", "vijayawada", "jodhpur", "madurai", "raipur",
    "kota", "chandigarh", "guwahati", "solapur", "hubli", "mysore", "mysuru",
    "tiruchirappalli", "trichy", "bareilly", "aligarh", "tiruppur",
    "moradabad", "jalandhar", "bhubaneswar", "salem", "warangal", "guntur",
    "bhiwandi", "saharanpur", "gorakhpur", "bikaner", "amravati", "noida",
    "jamshedpur", "bhilai", "cuttack", "firozabad", "kochi", "cochin",
    "nellore", "bhavnagar", "dehradun", "durgapur", "asansol", "rourkela",
    "nanded", "kolhapur", "ajmer", "akola", "gulbarga", "jamnagar", "ujjain",
    "loni", "siliguri", "jhansi", "ulhasnagar", "sangli", "mangalore",
    "erode", "belgaum", "ambattur", "tirunelveli", "malegaon", "gaya",
    "udaipur", "maheshtala", "davanagere", "kozhikode", "calicut",
    "thiruvananthapuram", "trivandrum",
)

PIN_CODE_RE = re.compile(r"\b\d{6}\b")
_STATE_ABBR_RE = re.compile(r"\b(?:" + "|".join(STATE_ABBREVIATIONS) + r")\b")


def address_indicator_count(text: str) -> int:
    """How many of {keyword, state, city, PIN code} appear in the text."""
    lower = text.lower()
    has_keyword = any(keyword in lower for keyword in ADDRESS_KEYWORDS)
    has_state = (
        any(state in lower for state in STATE_NAMES)
        or _STATE_ABBR_RE.search(lower) is not None
    )
    has_city = any(city in lower for city in CITY_NAMES)
    has_pin = PIN_CODE_RE.search(text) is not None
    return sum((has_keyword, has_state, has_city, has_pin))


def has_address_indicator(text: str) -> bool:
    """An address needs at least two independent indicators."""
    return address_indicator_count(text) >= 2


# ── GSTIN state codes (first two digits) ─────────────────────────────
GST_STATE_CODES = {
    "01": "Jammu & Kashmir",
    "02": "Himachal Pradesh",
    "03": "Punjab",
    "04": "Chandigarh",
    "05": "Uttarakhand",
    "06": "Haryana",
    "07": "Delhi",
    "08": "Rajasthan",
    "09": "Uttar Pradesh",
    "10": "Bihar",
    "11": "Sikkim",
    "12": "Arunachal Pradesh",
    "13": "Nagaland",
    "14": "Manipur",
    "15": "Mizoram",
    "16": "Tripura",
    "17": "Meghalaya",
    "18": "Assam",
    "19": "West Bengal",
    "20": "Jharkhand",
    "21": "Odisha",
    "22": "Chhattisgarh",
    "23": "Madhya Pradesh",
    "24": "Gujarat",
    "25": "Daman & Diu",
    "26": "Dadra & Nagar Haveli",
    "27": "Maharashtra",
    "29": "Karnataka",
    "30": "Goa",
    "31": "Lakshadweep",
    "32": "Kerala",
    "33": "Tamil Nadu",
    "34": "Puducherry",
    "35": "Andaman & Nicobar Islands",
    "36": "Telangana",
    "37": "Andhra Pradesh",
    "38": "Ladakh",
}

# ── States as printed on registration certificates (uppercase) ──────
INDIAN_STATES = (
    "ANDHRA PRADESH", "ARUNACHAL PRADESH", "ASSAM", "BIHAR", "CHHATTISGARH",
    "GOA", "GUJARAT", "HARYANA", "HIMACHAL PRADESH", "JHARKHAND", "KARNATAKA",
    "KERALA", "MADHYA PRADESH", "MAHARASHTRA", "MANIPUR", "MEGHALAYA",
    "MIZORAM", "NAGALAND", "ODISHA", "PUNJAB", "RAJASTHAN", "SIKKIM",
    "TAMIL NADU", "TELANGANA", "TRIPURA", "UTTAR PRADESH", "UTTARAKHAND",
    "WEST BENGAL", "DELHI", "JAMMU AND KASHMIR", "LADAKH", "CHANDIGARH",
    "PUDUCHERRY", "ANDAMAN AND NICOBAR", "DADRA AND NAGAR HAVELI",
    "DAMAN AND DIU", "LAKSHADWEEP",
)
