"""
BlazePose 33 랜드마크 정의 및 부분 집합

pose_modules 의 모든 모듈은 이 맵으로 랜드마크를 찾는다 (pts[11] = Left Shoulder).
"""

# ===== BlazePose 33 landmark map =====
POSE_LANDMARK_MAP = {
    "Nose": 0,
    "Left Eye Inner": 1,
    "Left Eye": 2,
    "Left Eye Outer": 3,
    "Right Eye Inner": 4,
    "Right Eye": 5,
    "Right Eye Outer": 6,
    "Left Ear": 7,
    "Right Ear": 8,
    "Mouth Left": 9,
    "Mouth Right": 10,
    "Left Shoulder": 11,
    "Right Shoulder": 12,
    "Left Elbow": 13,
    "Right Elbow": 14,
    "Left Wrist": 15,
    "Right Wrist": 16,
    "Left Pinky": 17,
    "Right Pinky": 18,
    "Left Index": 19,
    "Right Index": 20,
    "Left Thumb": 21,
    "Right Thumb": 22,
    "Left Hip": 23,
    "Right Hip": 24,
    "Left Knee": 25,
    "Right Knee": 26,
    "Left Ankle": 27,
    "Right Ankle": 28,
    "Left Heel": 29,
    "Right Heel": 30,
    "Left Foot Index": 31,
    "Right Foot Index": 32,
}

POSE_INDEX_TO_NAME = {v: k for k, v in POSE_LANDMARK_MAP.items()}

NUM_LANDMARKS = len(POSE_LANDMARK_MAP)

NOSE = POSE_LANDMARK_MAP["Nose"]
LEFT_SHOULDER = POSE_LANDMARK_MAP["Left Shoulder"]
RIGHT_SHOULDER = POSE_LANDMARK_MAP["Right Shoulder"]
LEFT_ELBOW = POSE_LANDMARK_MAP["Left Elbow"]
RIGHT_ELBOW = POSE_LANDMARK_MAP["Right Elbow"]
LEFT_WRIST = POSE_LANDMARK_MAP["Left Wrist"]
RIGHT_WRIST = POSE_LANDMARK_MAP["Right Wrist"]
LEFT_HIP = POSE_LANDMARK_MAP["Left Hip"]
RIGHT_HIP = POSE_LANDMARK_MAP["Right Hip"]
LEFT_KNEE = POSE_LANDMARK_MAP["Left Knee"]
RIGHT_KNEE = POSE_LANDMARK_MAP["Right Knee"]
LEFT_ANKLE = POSE_LANDMARK_MAP["Left Ankle"]
RIGHT_ANKLE = POSE_LANDMARK_MAP["Right Ankle"]

# ===== Landmark subsets =====
# 정규화 기준이 되는 몸통 사각형
TORSO_LANDMARKS = (LEFT_SHOULDER, RIGHT_SHOULDER, LEFT_HIP, RIGHT_HIP)

# 이게 안 보이면 사람이 화면에 제대로 없는 것
CRITICAL_LANDMARKS = TORSO_LANDMARKS

LIMB_LANDMARKS = (
    LEFT_ELBOW, RIGHT_ELBOW, LEFT_WRIST, RIGHT_WRIST,
    LEFT_KNEE, RIGHT_KNEE, LEFT_ANKLE, RIGHT_ANKLE,
)

# 위치 비교용: 얼굴 방향 + 팔 + 다리
CORE_LANDMARKS = (
    # 얼굴
    NOSE,
    POSE_LANDMARK_MAP["Left Eye"], POSE_LANDMARK_MAP["Right Eye"],
    POSE_LANDMARK_MAP["Left Ear"], POSE_LANDMARK_MAP["Right Ear"],
    # 상체
    LEFT_SHOULDER, RIGHT_SHOULDER, LEFT_ELBOW, RIGHT_ELBOW,
    # 하체
    LEFT_HIP, RIGHT_HIP, LEFT_KNEE, RIGHT_KNEE, LEFT_ANKLE, RIGHT_ANKLE,
)

# ===== Joint angle vocabulary =====
# 관절 이름 -> (A, 꼭짓점, C)
JOINT_ANGLE_DEFINITIONS = {
    "left_elbow": (LEFT_SHOULDER, LEFT_ELBOW, LEFT_WRIST),
    "right_elbow": (RIGHT_SHOULDER, RIGHT_ELBOW, RIGHT_WRIST),
    "left_shoulder": (LEFT_ELBOW, LEFT_SHOULDER, LEFT_HIP),
    "right_shoulder": (RIGHT_ELBOW, RIGHT_SHOULDER, RIGHT_HIP),
    "left_hip": (LEFT_SHOULDER, LEFT_HIP, LEFT_KNEE),
    "right_hip": (RIGHT_SHOULDER, RIGHT_HIP, RIGHT_KNEE),
    "left_knee": (LEFT_HIP, LEFT_KNEE, LEFT_ANKLE),
    "right_knee": (RIGHT_HIP, RIGHT_KNEE, RIGHT_ANKLE),
    "torso_left": (LEFT_SHOULDER, LEFT_HIP, RIGHT_HIP),
    "torso_right": (RIGHT_SHOULDER, RIGHT_HIP, LEFT_HIP),
}

JOINT_NAMES = tuple(JOINT_ANGLE_DEFINITIONS)
