"""Computer vision: joint kinematics, pose estimation, and video capture.

``pose`` and ``capture`` pull in OpenCV and MediaPipe; import them directly.
"""

from kinemotion.vision.kinematics import extract_foot_height, extract_knee_angle, joint_angle

__all__ = ["joint_angle", "extract_knee_angle", "extract_foot_height"]
