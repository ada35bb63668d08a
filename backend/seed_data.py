# seed_data.py
"""Fixture rows loaded by seed.py. Rows refer to each other by slug / name."""

SUBJECTS = [
    {
        "slug": "scholarship", "name_en": "Scholarship", "name_mr": "शिष्यवृत्ती",
        "description_en": "Maharashtra Scholarship Exam (Pre-Upper Primary & Pre-Secondary) for Class 5 & 8",
        "description_mr": "महाराष्ट्र शिष्यवृत्ती परीक्षा इयत्ता ५ व ८ साठी",
        "icon": "🏆", "order_index": 0, "is_category": True,
    },
    {
        "slug": "information_technology", "name_en": "Information Technology", "name_mr": "माहिती तंत्रज्ञान",
        "description_en": "HSC Information Technology (IT) for Class 11 & 12 - Maharashtra Board",
        "description_mr": "इयत्ता ११ व १२ साठी HSC माहिती तंत्रज्ञान (IT) - महाराष्ट्र बोर्ड",
        "icon": "💻", "order_index": 1,
    },
    {
        "slug": "scholarship-marathi", "parent": "scholarship",
        "name_en": "Marathi / First Language", "name_mr": "मराठी / प्रथम भाषा",
        "description_en": "Marathi language, grammar, and comprehension (Paper I)",
        "icon": "📝", "order_index": 1, "paper_number": "I",
    },
    {
        "slug": "scholarship-mathematics", "parent": "scholarship",
        "name_en": "Mathematics", "name_mr": "गणित",
        "description_en": "Mathematics and numerical ability (Paper I)",
        "icon": "🔢", "order_index": 2, "paper_number": "I",
    },
    {
        "slug": "scholarship-intelligence-test", "parent": "scholarship",
        "name_en": "Intelligence Test", "name_mr": "बुद्धिमत्ता चाचणी",
        "description_en": "Mental ability, logical reasoning, and aptitude (Paper II)",
        "icon": "🧠", "order_index": 3, "paper_number": "II",
    },
    {
        "slug": "scholarship-general-knowledge", "parent": "scholarship",
        "name_en": "General Knowledge", "name_mr": "सामान्य ज्ञान",
        "description_en": "General knowledge, science and social studies (Paper II)",
        "icon": "🌍", "order_index": 4, "paper_number": "II",
    },
]

_MARATHI_DIGITS = "०१२३४५६७८९"


def _mr(n: int) -> str:
    return "".join(_MARATHI_DIGITS[int(d)] for d in str(n))


CLASS_LEVELS = [
    {"slug": f"class-{n}", "name_en": f"Class {n}", "name_mr": f"इयत्ता {_mr(n)}", "order_index": n}
    for n in range(4, 13)
]

SCHOLARSHIP_CLASSES = ["class-4", "class-5", "class-7", "class-8"]
SUBJECT_CLASSES = {
    "scholarship": SCHOLARSHIP_CLASSES,
    "scholarship-marathi": SCHOLARSHIP_CLASSES,
    "scholarship-mathematics": SCHOLARSHIP_CLASSES,
    "scholarship-intelligence-test": SCHOLARSHIP_CLASSES,
    "scholarship-general-knowledge": SCHOLARSHIP_CLASSES,
    "information_technology": ["class-11", "class-12"],
}

CHAPTERS = {
    "information_technology": [
        ("Computer Basics", "संगणक मूलभूत"),
        ("Hardware Components", "हार्डवेअर घटक"),
        ("Software & Applications", "सॉफ्टवेअर आणि ऍप्लिकेशन्स"),
        ("Web Technologies", "वेब तंत्रज्ञान"),
        ("Web Publishing", "वेब प्रकाशन"),
        ("Introduction to SEO", "SEO चा परिचय"),
        ("Advanced JavaScript", "प्रगत JavaScript"),
        ("Server Side Scripting (PHP)", "सर्व्हर साइड स्क्रिप्टिंग (PHP)"),
    ],
    "scholarship-marathi": [
        ("Vocabulary & Word Meanings", "शब्दसंग्रह आणि शब्दार्थ"),
        ("Grammar & Sentence Structure", "व्याकरण आणि वाक्यरचना"),
        ("Proverbs & Idioms", "म्हणी आणि वाक्प्रचार"),
        ("Reading Comprehension", "आकलन उतारा"),
    ],
    "scholarship-mathematics": [
        ("Number System", "संख्या पद्धती"),
        ("Arithmetic Operations", "गणितीय क्रिया"),
        ("Fractions & Decimals", "अपूर्णांक आणि दशांश"),
        ("Geometry", "भूमिती"),
        ("Algebra Basics", "बीजगणित मूलभूत"),
        ("Mensuration", "क्षेत्रमिती"),
    ],
    "scholarship-intelligence-test": [
        ("Pattern Recognition", "नमुना ओळख"),
        ("Logical Reasoning", "तार्किक विचार"),
        ("Coding & Decoding", "सांकेतिक भाषा"),
        ("Analogy & Classification", "सादृश्यता आणि वर्गीकरण"),
        ("Figure & Mirror Images", "आकृती आणि प्रतिमा"),
    ],
    "scholarship-general-knowledge": [
        ("Science & Nature", "विज्ञान आणि निसर्ग"),
        ("History", "इतिहास"),
        ("Geography", "भूगोल"),
        ("Civics & Constitution", "नागरिकशास्त्र आणि संविधान"),
        ("Current Affairs", "चालू घडामोडी"),
    ],
}

SCHOOLS = [
    {"name": "Zilla Parishad Primary School", "location_city": "Pune", "location_state": "Maharashtra",
     "type": "Government", "level": "Primary", "is_verified": True},
    {"name": "New English School", "location_city": "Satara", "location_state": "Maharashtra",
     "type": "Aided", "level": "Secondary", "founded_year": "1899", "is_verified": True},
    {"name": "Jnana Prabodhini Prashala", "location_city": "Pune", "location_state": "Maharashtra",
     "type": "Private", "level": "Secondary", "founded_year": "1962", "is_verified": True},
    {"name": "Modern College of Arts, Science and Commerce", "location_city": "Pune",
     "location_state": "Maharashtra", "type": "Aided", "level": "Higher Secondary", "is_verified": True},
]

USERS = [
    {"email": "admin@examdesk.local", "name": "Admin User", "role": "admin"},
    {"email": "teacher@examdesk.local", "name": "Teacher User", "role": "teacher",
     "school": "New English School"},
    {"email": "student@examdesk.local", "name": "Student User", "role": "student",
     "school": "New English School", "class_level": "class-8", "preferred_language": "mr"},
]

# (subject slug, chapter name_en, question fields)
QUESTIONS = [
    ("information_technology", "Web Publishing", {
        "question_text": "HTML stands for _____.", "question_type": "fill_blank", "difficulty": "easy",
        "answer_data": {"blanks": [["HyperText Markup Language", "Hyper Text Markup Language"]]},
        "explanation": "HTML is the standard markup language for creating web pages.",
        "tags": ["html", "web"], "class_level": "12", "marks": 1,
    }),
    ("information_technology", "Web Publishing", {
        "question_text": "CSS stands for _____.", "question_type": "fill_blank", "difficulty": "easy",
        "answer_data": {"blanks": ["Cascading Style Sheets"]},
        "explanation": "CSS is used to style and lay out web pages.",
        "tags": ["css"], "class_level": "12", "marks": 1,
    }),
    ("information_technology", "Introduction to SEO", {
        "question_text": "SEO is only about paid advertising on search engines.",
        "question_type": "true_false", "difficulty": "easy", "answer_data": {"correct": False},
        "explanation": "SEO improves organic (unpaid) ranking.", "tags": ["seo"], "class_level": "12", "marks": 1,
    }),
    ("information_technology", "Advanced JavaScript", {
        "question_text": "JavaScript runs in the web browser.", "question_type": "true_false",
        "difficulty": "easy", "answer_data": {"correct": True}, "tags": ["javascript"],
        "class_level": "12", "marks": 1,
    }),
    ("information_technology", "Advanced JavaScript", {
        "question_text": "Which keyword declares a block-scoped variable in JavaScript?",
        "question_type": "mcq_single", "difficulty": "medium",
        "answer_data": {"options": ["var", "let", "function", "this"], "correct": 1},
        "tags": ["javascript"], "class_level": "12", "marks": 1,
    }),
    ("information_technology", "Server Side Scripting (PHP)", {
        "question_text": "Which symbol starts a variable name in PHP?", "question_type": "mcq_single",
        "difficulty": "easy", "answer_data": {"options": ["#", "@", "$", "&"], "correct": 2},
        "tags": ["php"], "class_level": "12", "marks": 1,
    }),
    ("information_technology", "Server Side Scripting (PHP)", {
        "question_text": "Select two superglobal arrays in PHP.", "question_type": "mcq_two",
        "difficulty": "medium",
        "answer_data": {"options": ["$_GET", "$_LIST", "$_POST", "$_ARRAY"], "correct": [0, 2]},
        "tags": ["php"], "class_level": "12", "marks": 2,
    }),
    ("information_technology", "Web Technologies", {
        "question_text": "Match the protocol with its use.", "question_type": "match", "difficulty": "medium",
        "answer_data": {"pairs": [
            {"left": "HTTP", "right": "Web pages"},
            {"left": "SMTP", "right": "Email"},
            {"left": "FTP", "right": "File transfer"},
        ]},
        "tags": ["protocols"], "class_level": "12", "marks": 3,
    }),
    ("information_technology", "Computer Basics", {
        "question_text": "Explain the difference between RAM and ROM.", "question_type": "short_answer",
        "difficulty": "medium", "answer_data": {"model_answer": "RAM is volatile read/write memory; ROM is non-volatile."},
        "tags": ["memory"], "class_level": "12", "marks": 4,
    }),
    ("scholarship-mathematics", "Number System", {
        "question_text": "५८७२१ मधील दशकस्थानच्या अंकाची स्थानिक किंमत किती?",
        "question_language": "mr", "question_type": "mcq_single", "difficulty": "medium",
        "answer_data": {"options": ["२", "२०", "२००", "२०००"], "correct": 1},
        "class_level": "class-8", "marks": 2,
    }),
    ("scholarship-mathematics", "Fractions & Decimals", {
        "question_text": "०.५ + ०.२५ = ?", "question_language": "mr", "question_type": "mcq_single",
        "difficulty": "easy", "answer_data": {"options": ["०.७", "०.७५", "०.८", "०.२७५"], "correct": 1},
        "class_level": "class-5", "marks": 2,
    }),
    ("scholarship-marathi", "Proverbs & Idioms", {
        "question_text": "'नाचता येईना अंगण वाकडे' या म्हणीचा अर्थ सांगा.", "question_language": "mr",
        "question_type": "mcq_single", "difficulty": "medium",
        "answer_data": {"options": [
            "स्वतःचा दोष दुसऱ्यावर ढकलणे", "खूप मेहनत करणे", "अंगण साफ करणे", "नृत्य शिकणे",
        ], "correct": 0},
        "class_level": "class-5", "marks": 2,
    }),
]

# sections shared by the seeded IT board pattern
IT_BOARD_SECTIONS = [
    {"id": "q1", "code": "q1", "name_en": "Fill in the Blanks", "name_mr": "रिकाम्या जागा भरा",
     "question_type": "fill_blank", "question_count": 10, "marks_per_question": 1, "total_marks": 10, "order_index": 1},
    {"id": "q2", "code": "q2", "name_en": "True or False", "name_mr": "खरे की खोटे",
     "question_type": "true_false", "question_count": 10, "marks_per_question": 1, "total_marks": 10, "order_index": 2},
    {"id": "q3", "code": "q3", "name_en": "MCQ (Single Correct)", "name_mr": "बहुपर्यायी (एक योग्य)",
     "question_type": "mcq_single", "question_count": 10, "marks_per_question": 1, "total_marks": 10, "order_index": 3},
    {"id": "q4", "code": "q4", "name_en": "MCQ (Two Correct)", "name_mr": "बहुपर्यायी (दोन योग्य)",
     "question_type": "mcq_two", "question_count": 10, "marks_per_question": 2, "total_marks": 20, "order_index": 4},
]

EXAM_STRUCTURES = [
    {
        "subject": "information_technology", "class_level": "class-12",
        "name_en": "Class 12 IT Board Exam Pattern", "name_mr": "बारावी IT बोर्ड परीक्षा पॅटर्न",
        "description_en": "Maharashtra State Board Class 12 IT exam pattern",
        "duration_minutes": 180, "passing_percentage": 35, "is_template": True,
        "sections": IT_BOARD_SECTIONS,
    },
    {
        "subject": "information_technology", "class_level": "class-12",
        "name_en": "Unit Test Pattern (25 marks)", "name_mr": "घटक चाचणी पॅटर्न (25 गुण)",
        "description_en": "Standard unit test format",
        "duration_minutes": 45, "passing_percentage": 35, "is_template": True,
        "sections": [
            {"id": "s1", "code": "s1", "name_en": "Fill in the Blanks", "name_mr": "रिकाम्या जागा भरा",
             "question_type": "fill_blank", "question_count": 5, "marks_per_question": 1, "total_marks": 5, "order_index": 1},
            {"id": "s2", "code": "s2", "name_en": "MCQ (Single Correct)", "name_mr": "बहुपर्यायी (एक योग्य)",
             "question_type": "mcq_single", "question_count": 10, "marks_per_question": 1, "total_marks": 10, "order_index": 2},
            {"id": "s3", "code": "s3", "name_en": "Short Answers", "name_mr": "लघु उत्तरे",
             "question_type": "short_answer", "question_count": 5, "marks_per_question": 2, "total_marks": 10, "order_index": 3},
        ],
    },
    {
        "subject": "scholarship-mathematics", "class_level": "class-8",
        "name_en": "Scholarship Mathematics Paper", "name_mr": "शिष्यवृत्ती गणित पेपर",
        "duration_minutes": 90, "passing_percentage": 40, "is_template": True,
        "sections": [
            {"id": "m1", "code": "m1", "name_en": "Mathematics", "name_mr": "गणित",
             "question_type": "mcq_single", "question_count": 50, "marks_per_question": 2, "total_marks": 100, "order_index": 1},
        ],
    },
]

# day offsets are relative to the day the seed runs
SCHEDULED_EXAMS = [
    {"structure": "Unit Test Pattern (25 marks)", "name_en": "Unit Test 1", "name_mr": "घटक चाचणी १",
     "status": "completed", "day_offset": -1, "scheduled_time": "10:00:00"},
    {"structure": "Unit Test Pattern (25 marks)", "name_en": "Unit Test 2", "name_mr": "घटक चाचणी २",
     "status": "active", "day_offset": 0, "scheduled_time": "10:00:00"},
    {"structure": "Class 12 IT Board Exam Pattern", "name_en": "Mid-Term Exam", "name_mr": "सहामाही परीक्षा",
     "status": "scheduled", "day_offset": 7, "scheduled_time": "09:30:00"},
    {"structure": "Class 12 IT Board Exam Pattern", "name_en": "Final Board Exam", "name_mr": "अंतिम बोर्ड परीक्षा",
     "status": "draft"},
    {"structure": "Unit Test Pattern (25 marks)", "name_en": "Practice Test 1", "name_mr": "सराव चाचणी १",
     "status": "draft", "max_attempts": 3},
    {"structure": "Scholarship Mathematics Paper", "name_en": "Scholarship Mock Test", "name_mr": "शिष्यवृत्ती सराव परीक्षा",
     "status": "scheduled", "day_offset": 1, "scheduled_time": "11:00:00", "max_attempts": 2},
]
